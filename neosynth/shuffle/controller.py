"""
Shuffle controller: the player's entry point into the shuffle engine.

Holds the enabled flag and the listening session, and turns history store
round trips into next-track picks. Selection never fails: when the store
cannot be reached or answers garbage, the pick degrades to uniform random.
Operations that carry explicit user intent (record, reset, clear) report
failure to the caller instead.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from neosynth.enums import SelectionPath
from neosynth.models.playlist import Track
from neosynth.schemas.history_payloads import ShuffleStatistics
from neosynth.shuffle.exceptions import HistoryClientError
from neosynth.shuffle.history_client import HistoryClient, HttpHistoryClient
from neosynth.shuffle.selector import (
    NO_TRACK,
    Selection,
    uniform_choice,
    weighted_choice,
)
from neosynth.shuffle.session import DEFAULT_SESSION_PREFIX, SessionTracker
from neosynth.shuffle.weights import HistoryEntry, compute_weights

logger = logging.getLogger(__name__)


def _log_store_failure(action: str, error: Exception, level: int = logging.ERROR):
    """Log a failed store call. Anything but a HistoryClientError is a bug."""
    if isinstance(error, HistoryClientError):
        logger.log(level, "Failed to %s: %s", action, error)
    else:
        logger.error(
            "Unexpected error trying to %s: %s", action, error, exc_info=True
        )


class ShuffleController:
    """
    Session-aware weighted shuffle for one player.

    One instance per player. Calls to select_next_track() are expected
    one at a time; the controller does no locking of its own.
    """

    def __init__(
        self,
        history_client: HistoryClient,
        user_id: Optional[str] = None,
        session_tracker: Optional[SessionTracker] = None,
        rng=None,
    ):
        """
        Initialize the controller.

        Args:
            history_client: Client for the play history store.
            user_id: The listening user. Without one, store operations
                are skipped and report failure.
            session_tracker: Optional tracker, e.g. with a custom prefix.
            rng: Optional source of randomness for selection.
        """
        self._history_client = history_client
        self._user_id = user_id
        self._sessions = session_tracker or SessionTracker()
        self._rng = rng
        self._enabled = False
        self.last_selection: Optional[Selection] = None

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], user_id: Optional[str] = None, rng=None
    ) -> "ShuffleController":
        """Build a controller backed by the HTTP history client."""
        return cls(
            HttpHistoryClient.from_config(config),
            user_id=user_id,
            session_tracker=SessionTracker(
                prefix=config.get("SHUFFLE_SESSION_PREFIX", DEFAULT_SESSION_PREFIX)
            ),
            rng=rng,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def session_id(self) -> Optional[str]:
        return self._sessions.session_id

    @property
    def session_tracker(self) -> SessionTracker:
        return self._sessions

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    # -----------------------------------------------------------------
    # Mode switching
    # -----------------------------------------------------------------

    async def enable(self) -> bool:
        """
        Turn shuffle on and start a fresh session.

        The session rotates even when shuffle is already on.

        Returns:
            True if the store acknowledged the new session.
        """
        self._enabled = True
        logger.debug("Shuffle enabled")
        return await self.reset_current_session()

    def disable(self) -> None:
        """Turn shuffle off. History and session id are left as they are."""
        self._enabled = False
        self._sessions.deactivate()
        logger.debug("Shuffle disabled")

    # -----------------------------------------------------------------
    # Selection
    # -----------------------------------------------------------------

    async def select_next_track(
        self, candidates: Sequence[int], playlist: Sequence[Track]
    ) -> int:
        """
        Pick the next track to play.

        Args:
            candidates: Playlist indices eligible for this pick.
            playlist: The full playlist.

        Returns:
            The chosen playlist index, or -1 when there are no candidates.
        """
        if not candidates:
            self.last_selection = Selection(NO_TRACK, SelectionPath.EMPTY)
            return NO_TRACK

        if len(candidates) == 1:
            # Forced choice, no store round trip needed.
            self.last_selection = Selection(
                candidates[0], SelectionPath.SINGLE_CANDIDATE
            )
            return candidates[0]

        try:
            history = await self._fetch_history(playlist)
        except Exception as e:
            _log_store_failure("fetch play history", e, logging.WARNING)
            self.last_selection = uniform_choice(candidates, self._rng)
            return self.last_selection.index

        weights = compute_weights(candidates, playlist, history)
        self.last_selection = weighted_choice(candidates, weights, self._rng)
        return self.last_selection.index

    async def _fetch_history(
        self, playlist: Sequence[Track]
    ) -> Dict[str, HistoryEntry]:
        # Without a user every track counts as never played.
        if not self._user_id:
            return {}
        return await self._history_client.get_play_history(
            self._user_id, [track.url for track in playlist]
        )

    # -----------------------------------------------------------------
    # Store operations with explicit user intent
    # -----------------------------------------------------------------

    async def record_play(self, track_url: str, track_name: str) -> bool:
        """
        Record that a track started playing in the current session.

        Returns:
            True on success. False when data is missing or the store
            failed; playback should carry on either way.
        """
        if not track_url or not track_name or not self._user_id:
            logger.warning("Cannot record play: missing required data")
            return False

        try:
            play_count = await self._history_client.record_play(
                self._user_id, track_url, track_name, self.session_id
            )
        except Exception as e:
            _log_store_failure(f"record play for '{track_name}'", e)
            return False

        logger.info(
            "Play recorded for '%s' (play count: %s)", track_name, play_count
        )
        return True

    async def reset_current_session(self) -> bool:
        """
        Rotate to a new session and have the store clear session flags.

        The local id rotates before the store is contacted, so a failed
        reset never reuses the old id.

        Returns:
            True if the store acknowledged the reset.
        """
        session = self._sessions.rotate()
        if not self._user_id:
            logger.warning("Cannot reset session on the store: no user ID")
            return False

        try:
            await self._history_client.reset_session(
                self._user_id, session.session_id
            )
        except Exception as e:
            _log_store_failure("reset shuffle session", e)
            return False

        logger.debug("Shuffle session reset successfully")
        return True

    async def get_statistics(self) -> Optional[ShuffleStatistics]:
        """
        Fetch aggregate play statistics from the store.

        Returns:
            The statistics; all zeros without a user; None if the store
            failed.
        """
        if not self._user_id:
            return ShuffleStatistics.empty()

        try:
            return await self._history_client.get_statistics(self._user_id)
        except Exception as e:
            _log_store_failure("fetch shuffle statistics", e)
            return None

    async def clear_play_history(self) -> Optional[int]:
        """
        Delete all play history of the user. Irreversible.

        Returns:
            Number of deleted records, or None on failure or without a
            user.
        """
        if not self._user_id:
            logger.warning("Cannot clear play history: no user ID")
            return None

        try:
            deleted = await self._history_client.clear_history(self._user_id)
        except Exception as e:
            _log_store_failure("clear play history", e)
            return None

        logger.info("Play history cleared: %d records deleted", deleted)
        return deleted
