"""
Play history service: the store behind the shuffle engine.

Records plays, serves history snapshots for weight computation, resets
session flags, aggregates statistics, and clears a user's ledger.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import IntegrityError

from neosynth.enums import TrackSortField, SortOrder
from neosynth.models.db import db, PlayHistory
from neosynth.services.base import safe_commit

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    TrackSortField.PLAY_COUNT: PlayHistory.play_count,
    TrackSortField.LAST_PLAYED: PlayHistory.last_played,
    TrackSortField.TRACK_NAME: PlayHistory.track_name,
}


class PlayHistoryError(Exception):
    """Base exception for play history operations."""

    pass


class PlayHistoryValidationError(PlayHistoryError):
    """Raised when a play history request is missing required data."""

    pass


class PlayHistoryService:
    """Service for managing per-user play history records."""

    @staticmethod
    def _increment(
        user_id: str,
        track_url: str,
        session_id: Optional[str],
        now: datetime,
    ) -> int:
        """Bump play_count in SQL so concurrent plays are not lost."""
        return (
            PlayHistory.query.filter_by(
                user_id=user_id, track_url=track_url
            ).update(
                {
                    PlayHistory.play_count: PlayHistory.play_count + 1,
                    PlayHistory.last_played: now,
                    PlayHistory.played_in_current_session: True,
                    PlayHistory.session_id: session_id,
                    PlayHistory.updated_at: now,
                },
                synchronize_session=False,
            )
        )

    @staticmethod
    def record_play(
        user_id: str,
        track_url: str,
        track_name: str,
        session_id: Optional[str] = None,
    ) -> PlayHistory:
        """
        Record one play of a track.

        Increments the existing record, or creates it with a play count
        of 1. Either way the track is flagged as played in the current
        session and stamped with the given session id.

        Args:
            user_id: The listening user's id.
            track_url: Url of the track (its identity).
            track_name: Display name, stored on first play.
            session_id: Id of the listening session, if any.

        Returns:
            The up-to-date PlayHistory instance.

        Raises:
            PlayHistoryValidationError: If user, url or name is missing.
            PlayHistoryError: If the write fails.
        """
        if not user_id or not track_url or not track_name:
            raise PlayHistoryValidationError(
                "user_id, track_url and track_name are required"
            )

        now = datetime.now(timezone.utc)
        try:
            updated = PlayHistoryService._increment(
                user_id, track_url, session_id, now
            )
            if not updated:
                db.session.add(
                    PlayHistory(
                        user_id=user_id,
                        track_url=track_url,
                        track_name=track_name,
                        play_count=1,
                        last_played=now,
                        played_in_current_session=True,
                        session_id=session_id,
                    )
                )
                db.session.flush()
        except IntegrityError:
            # Another request inserted the row first; count on top of it.
            db.session.rollback()
            logger.info(
                "Concurrent first play for user %s on %s, incrementing",
                user_id,
                track_url,
            )
            try:
                PlayHistoryService._increment(
                    user_id, track_url, session_id, now
                )
            except Exception as e:
                db.session.rollback()
                logger.error(
                    "Failed to record play for user %s: %s",
                    user_id,
                    e,
                    exc_info=True,
                )
                raise PlayHistoryError(f"Failed to record play: {e}")
        except Exception as e:
            db.session.rollback()
            logger.error(
                "Failed to record play for user %s: %s",
                user_id,
                e,
                exc_info=True,
            )
            raise PlayHistoryError(f"Failed to record play: {e}")

        safe_commit(
            f"record play for user={user_id}, track={track_url}",
            PlayHistoryError,
        )

        entry = PlayHistory.query.filter_by(
            user_id=user_id, track_url=track_url
        ).first()
        if entry is None:
            raise PlayHistoryError(
                f"Play record vanished after write: {track_url}"
            )
        db.session.refresh(entry)
        return entry

    @staticmethod
    def get_play_history(
        user_id: str, track_urls: List[str]
    ) -> Dict[str, Dict[str, Any]]:
        """
        Get history entries for exactly the requested tracks.

        Urls with no record are left out; callers treat them as
        never played.

        Args:
            user_id: The listening user's id.
            track_urls: Urls to look up.

        Returns:
            Dictionary mapping track_url to its history entry dict.
        """
        if not track_urls:
            return {}

        try:
            rows = PlayHistory.query.filter(
                PlayHistory.user_id == user_id,
                PlayHistory.track_url.in_(set(track_urls)),
            ).all()
        except Exception as e:
            db.session.rollback()
            logger.error(
                "Failed to fetch play history for user %s: %s",
                user_id,
                e,
                exc_info=True,
            )
            raise PlayHistoryError(f"Failed to fetch play history: {e}")

        return {row.track_url: row.to_history_entry() for row in rows}

    @staticmethod
    def reset_session(user_id: str, session_id: Optional[str] = None) -> int:
        """
        Start a new listening session for a user.

        Clears played_in_current_session on every record of the user and
        stamps them with the new session id.

        Args:
            user_id: The listening user's id.
            session_id: The id of the session that starts now.

        Returns:
            Number of records touched.

        Raises:
            PlayHistoryError: If the update fails.
        """
        now = datetime.now(timezone.utc)
        try:
            touched = PlayHistory.query.filter_by(user_id=user_id).update(
                {
                    PlayHistory.played_in_current_session: False,
                    PlayHistory.session_id: session_id,
                    PlayHistory.updated_at: now,
                },
                synchronize_session=False,
            )
        except Exception as e:
            db.session.rollback()
            logger.error(
                "Failed to reset session for user %s: %s",
                user_id,
                e,
                exc_info=True,
            )
            raise PlayHistoryError(f"Failed to reset session: {e}")

        safe_commit(
            f"reset session for user={user_id}, session={session_id}",
            PlayHistoryError,
        )
        return touched

    @staticmethod
    def get_statistics(user_id: str) -> Dict[str, Any]:
        """
        Get aggregate play statistics for a user.

        Args:
            user_id: The listening user's id.

        Returns:
            Dictionary with keys:
                - total_tracks (int)
                - total_plays (int)
                - avg_plays_per_track (float)
                - max_plays (int)
                - min_plays (int)
                - tracks_played_in_session (int)
        """
        try:
            row = (
                db.session.query(
                    db.func.count(PlayHistory.id),
                    db.func.sum(PlayHistory.play_count),
                    db.func.avg(PlayHistory.play_count),
                    db.func.max(PlayHistory.play_count),
                    db.func.min(PlayHistory.play_count),
                    db.func.sum(
                        db.case(
                            (
                                PlayHistory.played_in_current_session.is_(
                                    True
                                ),
                                1,
                            ),
                            else_=0,
                        )
                    ),
                )
                .filter(PlayHistory.user_id == user_id)
                .one()
            )
        except Exception as e:
            db.session.rollback()
            logger.error(
                "Failed to compute statistics for user %s: %s",
                user_id,
                e,
                exc_info=True,
            )
            raise PlayHistoryError(f"Failed to compute statistics: {e}")

        total_tracks, total_plays, avg_plays, max_plays, min_plays, in_session = row
        if not total_tracks:
            return {
                "total_tracks": 0,
                "total_plays": 0,
                "avg_plays_per_track": 0.0,
                "max_plays": 0,
                "min_plays": 0,
                "tracks_played_in_session": 0,
            }

        return {
            "total_tracks": int(total_tracks),
            "total_plays": int(total_plays or 0),
            "avg_plays_per_track": float(avg_plays or 0.0),
            "max_plays": int(max_plays or 0),
            "min_plays": int(min_plays or 0),
            "tracks_played_in_session": int(in_session or 0),
        }

    @staticmethod
    def get_tracks(
        user_id: str,
        sort_by: str = TrackSortField.PLAY_COUNT,
        order: str = SortOrder.DESC,
        limit: int = 50,
    ) -> List[PlayHistory]:
        """
        List a user's history records for inspection.

        Args:
            user_id: The listening user's id.
            sort_by: One of the TrackSortField values.
            order: 'asc' or 'desc'.
            limit: Maximum number of records to return.

        Returns:
            List of PlayHistory instances in the requested order.

        Raises:
            PlayHistoryValidationError: If sort_by is unknown.
            PlayHistoryError: If the query fails.
        """
        column = _SORT_COLUMNS.get(sort_by)
        if column is None:
            raise PlayHistoryValidationError(
                f"Unknown sort field: {sort_by}"
            )
        ordering = column.asc() if order == SortOrder.ASC else column.desc()

        try:
            return (
                PlayHistory.query.filter_by(user_id=user_id)
                .order_by(ordering, PlayHistory.id.asc())
                .limit(limit)
                .all()
            )
        except Exception as e:
            db.session.rollback()
            logger.error(
                "Failed to list tracks for user %s: %s",
                user_id,
                e,
                exc_info=True,
            )
            raise PlayHistoryError(f"Failed to list tracks: {e}")

    @staticmethod
    def clear_history(user_id: str) -> int:
        """
        Delete every history record of a user. Irreversible.

        Args:
            user_id: The listening user's id.

        Returns:
            Number of records deleted.

        Raises:
            PlayHistoryError: If the delete fails.
        """
        try:
            deleted = PlayHistory.query.filter_by(user_id=user_id).delete(
                synchronize_session=False
            )
        except Exception as e:
            db.session.rollback()
            logger.error(
                "Failed to clear history for user %s: %s",
                user_id,
                e,
                exc_info=True,
            )
            raise PlayHistoryError(f"Failed to clear play history: {e}")

        safe_commit(
            f"clear play history for user={user_id} ({deleted} records)",
            PlayHistoryError,
        )
        return deleted
