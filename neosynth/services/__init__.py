"""
NeoSynth Services Package

This package holds the store-side service layer for play history.

Usage:
    from neosynth.services import PlayHistoryService

    # Or import specific exceptions
    from neosynth.services import PlayHistoryError, PlayHistoryValidationError

Example:
    entry = PlayHistoryService.record_play(
        "user123", "https://cdn.example.com/a.mp3", "Track A", "shuffle_1_x"
    )
    snapshot = PlayHistoryService.get_play_history("user123", [entry.track_url])
"""

from neosynth.services.play_history_service import (
    PlayHistoryService,
    PlayHistoryError,
    PlayHistoryValidationError,
)

__all__ = [
    "PlayHistoryService",
    "PlayHistoryError",
    "PlayHistoryValidationError",
]
