"""
SQLAlchemy database models for NeoSynth.

Defines the PlayHistory model: the per-user, per-track ledger that the
shuffle engine reads weights from.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any

from flask_sqlalchemy import SQLAlchemy

logger = logging.getLogger(__name__)

# The SQLAlchemy instance. Initialized with the Flask app in create_app().
db = SQLAlchemy()


class PlayHistory(db.Model):
    """
    Play count and session flag for one track of one user.

    Created on the first recorded play of a (user, track) pair and
    incremented on every later play. Rows are only removed by an explicit
    history clear, so play_count never decreases while a row exists.
    """

    __tablename__ = "play_history"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(db.String(50), nullable=False, index=True)
    track_url = db.Column(db.String(2048), nullable=False)
    track_name = db.Column(db.String(200), nullable=False)
    play_count = db.Column(db.Integer, nullable=False, default=1)
    last_played = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    played_in_current_session = db.Column(
        db.Boolean, nullable=False, default=False
    )
    # Id of the listening session that last touched this row.
    session_id = db.Column(db.String(128), nullable=True)

    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "track_url", name="uq_play_history_user_track"
        ),
        db.Index(
            "ix_play_history_user_last_played", "user_id", "last_played"
        ),
        db.Index(
            "ix_play_history_user_play_count", "user_id", "play_count"
        ),
    )

    def to_history_entry(self) -> Dict[str, Any]:
        """Serialize the fields the weight calculator needs."""
        return {
            "play_count": self.play_count,
            "last_played": (
                self.last_played.isoformat() if self.last_played else None
            ),
            "played_in_current_session": bool(
                self.played_in_current_session
            ),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the PlayHistory to a dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "track_url": self.track_url,
            "track_name": self.track_name,
            "play_count": self.play_count,
            "last_played": (
                self.last_played.isoformat() if self.last_played else None
            ),
            "played_in_current_session": bool(
                self.played_in_current_session
            ),
            "session_id": self.session_id,
            "created_at": (
                self.created_at.isoformat() if self.created_at else None
            ),
            "updated_at": (
                self.updated_at.isoformat() if self.updated_at else None
            ),
        }

    def __repr__(self) -> str:
        return (
            f"<PlayHistory {self.user_id} '{self.track_name}' "
            f"x{self.play_count}>"
        )
