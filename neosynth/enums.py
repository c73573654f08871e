"""
Enums for selection outcomes, session states, and history sort keys.

Single source of truth for string constants used across schemas,
services, and the shuffle engine.
"""

from enum import StrEnum


class SelectionPath(StrEnum):
    """Which branch of the selector produced a pick."""
    WEIGHTED = "weighted"
    UNIFORM_FALLBACK = "uniform_fallback"
    SINGLE_CANDIDATE = "single_candidate"
    EMPTY = "empty"


class SessionState(StrEnum):
    """Lifecycle states of a shuffle listening session."""
    NO_SESSION = "no_session"
    ACTIVE = "active"
    INACTIVE = "inactive"


class TrackSortField(StrEnum):
    """Sort keys accepted by the history track listing."""
    PLAY_COUNT = "playCount"
    LAST_PLAYED = "lastPlayed"
    TRACK_NAME = "trackName"


class SortOrder(StrEnum):
    """Sort direction for history listings."""
    ASC = "asc"
    DESC = "desc"
