"""
Weight calculation for the session-aware shuffle.

Tracks played less than the playlist average get proportionally more
weight, tracks already heard in the current session are penalized, and
no track ever drops to zero weight.
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Sequence

from neosynth.models.playlist import Track

logger = logging.getLogger(__name__)

# Multiplier applied to tracks already played in the current session.
SESSION_PENALTY: float = 0.1
# Lower bound for every weight so that any track stays selectable.
MIN_WEIGHT: float = 0.001


@dataclass(frozen=True)
class HistoryEntry:
    """Play history of one track as seen by the weight calculator."""

    play_count: int = 0
    played_in_current_session: bool = False


NEVER_PLAYED = HistoryEntry()


def average_play_count(
    playlist: Sequence[Track], history: Mapping[str, HistoryEntry]
) -> float:
    """
    Mean play count over the whole playlist.

    The mean is taken over every track, not just the candidates, so the
    weights stay stable as the candidate set shrinks during a session.
    Returns 0.0 for an empty playlist.
    """
    if not playlist:
        return 0.0
    total = sum(
        history.get(track.url, NEVER_PLAYED).play_count for track in playlist
    )
    return total / len(playlist)


def track_weight(entry: HistoryEntry, avg_play_count: float) -> float:
    """
    Weight of one track given the playlist's average play count.

    Formula: (avg + 1) / (play_count + 1), times SESSION_PENALTY when the
    track was played this session, floored at MIN_WEIGHT.
    """
    weight = (avg_play_count + 1) / (entry.play_count + 1)
    if entry.played_in_current_session:
        weight *= SESSION_PENALTY
    return max(weight, MIN_WEIGHT)


def compute_weights(
    candidates: Sequence[int],
    playlist: Sequence[Track],
    history: Mapping[str, HistoryEntry],
) -> List[float]:
    """
    Compute selection weights for candidate playlist indices.

    Args:
        candidates: Playlist indices eligible for this draw.
        playlist: The full playlist, in display order.
        history: Map of track url to HistoryEntry. Missing urls count as
            never played and not played this session.

    Returns:
        One weight per candidate, in candidate order. Empty when there
        are no candidates.
    """
    if not candidates:
        return []

    avg_play_count = average_play_count(playlist, history)

    weights = []
    for index in candidates:
        if not 0 <= index < len(playlist):
            logger.warning(
                "Candidate index %s is outside the playlist (%d tracks)",
                index,
                len(playlist),
            )
            weights.append(MIN_WEIGHT)
            continue
        entry = history.get(playlist[index].url, NEVER_PLAYED)
        weights.append(track_weight(entry, avg_play_count))

    return weights
