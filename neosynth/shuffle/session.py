"""
Listening session tracking for the shuffle controller.

A session id is minted every time shuffle is enabled or reset. The store
uses it to scope "played in current session" flags; rotating the id is the
only way those flags get cleared.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from neosynth.enums import SessionState

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PREFIX = "shuffle_"


def generate_session_id(
    prefix: str = DEFAULT_SESSION_PREFIX, timestamp_ms: Optional[int] = None
) -> str:
    """
    Build an opaque, URL-safe session id.

    Format: ``<prefix><epoch milliseconds>_<random token>``.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{prefix}{timestamp_ms}_{secrets.token_hex(6)}"


@dataclass(frozen=True)
class Session:
    """One listening session."""

    session_id: str
    started_at: datetime


class SessionTracker:
    """
    Owns the session id lifecycle.

    States: no_session -> active (first rotate) -> active with a new id
    (every later rotate) -> inactive (deactivate). Rotating from inactive
    starts a fresh session, so disable-then-enable behaves like a reset.
    """

    def __init__(self, prefix: str = DEFAULT_SESSION_PREFIX):
        self._prefix = prefix
        self._state = SessionState.NO_SESSION
        self._current: Optional[Session] = None
        self._last_timestamp_ms = 0
        self._issued: List[str] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current(self) -> Optional[Session]:
        return self._current

    @property
    def session_id(self) -> Optional[str]:
        return self._current.session_id if self._current else None

    @property
    def history(self) -> List[str]:
        """Every session id minted by this tracker, oldest first."""
        return list(self._issued)

    def _next_timestamp_ms(self) -> int:
        # Strictly increasing so two rotations in the same millisecond
        # still produce different ids.
        now_ms = time.time_ns() // 1_000_000
        self._last_timestamp_ms = max(now_ms, self._last_timestamp_ms + 1)
        return self._last_timestamp_ms

    def rotate(self) -> Session:
        """Start a new session with a never-before-used id."""
        previous = self.session_id
        session_id = generate_session_id(
            self._prefix, self._next_timestamp_ms()
        )

        self._current = Session(
            session_id=session_id,
            started_at=datetime.now(timezone.utc),
        )
        self._issued.append(session_id)
        self._state = SessionState.ACTIVE
        logger.debug(
            "Shuffle session rotated: %s -> %s", previous, session_id
        )
        return self._current

    def deactivate(self) -> None:
        """Mark the session unused. The id is kept until the next rotate."""
        if self._state == SessionState.ACTIVE:
            self._state = SessionState.INACTIVE
            logger.debug("Shuffle session %s inactive", self.session_id)
