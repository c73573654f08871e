"""
NeoSynth Models Package.

Exports the SQLAlchemy database instance, the play history model, and the
Track/Playlist dataclasses consumed by the shuffle engine.

Usage:
    from neosynth.models import db, PlayHistory
    from neosynth.models import Track, Playlist
"""

from neosynth.models.db import db, PlayHistory
from neosynth.models.playlist import Track, Playlist

__all__ = [
    "db",
    "PlayHistory",
    "Track",
    "Playlist",
]
