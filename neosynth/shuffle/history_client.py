"""
History clients: the shuffle engine's only window onto the play history store.

HistoryClient defines the contract. HttpHistoryClient talks to the store's
JSON API with requests; LocalHistoryClient calls the store's service layer
in the same process. Both raise TransportError or ContractMismatchError and
nothing else.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError
from requests.exceptions import ConnectionError, RequestException, Timeout

from neosynth.schemas.history_payloads import (
    ClearHistoryResponse,
    HistoryEntryPayload,
    RecordPlayResponse,
    ShuffleStatistics,
)
from neosynth.shuffle.exceptions import ContractMismatchError, TransportError
from neosynth.shuffle.weights import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0  # seconds


class HistoryClient(ABC):
    """Interface to the per-user play history store."""

    @abstractmethod
    async def record_play(
        self,
        user_id: str,
        track_url: str,
        track_name: str,
        session_id: Optional[str],
    ) -> int:
        """
        Increment a track's play count and flag it as played this session.

        Returns:
            The track's play count after the increment.
        """

    @abstractmethod
    async def get_play_history(
        self, user_id: str, track_urls: List[str]
    ) -> Dict[str, HistoryEntry]:
        """
        Fetch history for the given urls.

        Returns:
            Map of url to HistoryEntry. Urls never played are absent.
        """

    @abstractmethod
    async def reset_session(
        self, user_id: str, session_id: Optional[str]
    ) -> None:
        """Start ``session_id`` and mark every earlier session flag stale."""

    @abstractmethod
    async def get_statistics(self, user_id: str) -> ShuffleStatistics:
        """Aggregate play statistics for the user."""

    @abstractmethod
    async def clear_history(self, user_id: str) -> int:
        """Delete all history of the user and return the deleted count."""


def _to_history_entries(
    payload: Any, track_urls: List[str]
) -> Dict[str, HistoryEntry]:
    """Validate a history snapshot payload and keep the requested urls."""
    if not isinstance(payload, Mapping):
        raise ContractMismatchError(
            f"History payload must be an object, got {type(payload).__name__}"
        )

    requested = set(track_urls)
    entries = {}
    for url, raw in payload.items():
        if url not in requested:
            logger.debug("Ignoring unrequested history entry for %s", url)
            continue
        if not isinstance(raw, Mapping):
            raise ContractMismatchError(
                f"History entry for {url} must be an object"
            )
        try:
            parsed = HistoryEntryPayload.model_validate(raw)
        except ValidationError as e:
            raise ContractMismatchError(
                f"Malformed history entry for {url}: {e}"
            )
        entries[url] = HistoryEntry(
            play_count=parsed.play_count,
            played_in_current_session=parsed.played_in_current_session,
        )
    return entries


class HttpHistoryClient(HistoryClient):
    """
    History client for the store's JSON API.

    Blocking requests calls run in a worker thread so the controller can
    await them. Requests are sent once: a retried record_play could count
    the same play twice.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP history client.

        Args:
            base_url: API root, e.g. ``http://localhost:8000/api``.
            timeout: Per-request timeout in seconds.
            session: Optional preconfigured requests.Session.
        """
        if not base_url:
            raise ValueError("History API base url is required")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "HttpHistoryClient":
        """Build a client from a Flask config mapping."""
        return cls(
            base_url=config.get("HISTORY_API_BASE_URL"),
            timeout=float(
                config.get("HISTORY_REQUEST_TIMEOUT", DEFAULT_TIMEOUT)
            ),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # -----------------------------------------------------------------
    # Contract operations
    # -----------------------------------------------------------------

    async def record_play(self, user_id, track_url, track_name, session_id):
        data = await self._call(
            "POST",
            self._shuffle_path(user_id, "play"),
            json={
                "trackUrl": track_url,
                "trackName": track_name,
                "sessionId": session_id,
            },
        )
        return self._parse(RecordPlayResponse, data).play_count

    async def get_play_history(self, user_id, track_urls):
        if not track_urls:
            return {}
        data = await self._call(
            "GET",
            self._shuffle_path(user_id, "history"),
            params={"tracks": ",".join(track_urls)},
        )
        return _to_history_entries(data, track_urls)

    async def reset_session(self, user_id, session_id):
        await self._call(
            "POST",
            self._shuffle_path(user_id, "reset-session"),
            json={"sessionId": session_id},
        )

    async def get_statistics(self, user_id):
        data = await self._call("GET", self._shuffle_path(user_id, "stats"))
        return self._parse(ShuffleStatistics, data)

    async def clear_history(self, user_id):
        data = await self._call(
            "DELETE", self._shuffle_path(user_id, "history")
        )
        return self._parse(ClearHistoryResponse, data).deleted_count

    # -----------------------------------------------------------------
    # Internal request handling
    # -----------------------------------------------------------------

    def _shuffle_path(self, user_id: str, action: str) -> str:
        return f"/users/{quote(user_id, safe='')}/shuffle/{action}"

    @staticmethod
    def _parse(model, data: Any):
        if not isinstance(data, Mapping):
            raise ContractMismatchError(
                f"{model.__name__} payload must be an object"
            )
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ContractMismatchError(
                f"Malformed {model.__name__} payload: {e}"
            )

    async def _call(
        self,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json: Any = None,
    ) -> Any:
        return await asyncio.to_thread(
            self._request, method, path, params, json
        )

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json: Any = None,
    ) -> Any:
        """
        Execute one HTTP request against the store.

        Raises:
            TransportError: Network failure, timeout or non-2xx status.
            ContractMismatchError: Response body is not JSON.
        """
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(
                method, url, params=params, json=json, timeout=self._timeout,
            )
        except (ConnectionError, Timeout, RequestException) as e:
            logger.warning("History store unreachable (%s %s): %s", method, url, e)
            raise TransportError(f"History store unreachable: {e}")

        if not response.ok:
            try:
                msg = response.json().get("message", response.text)
            except Exception:
                msg = response.text
            logger.warning(
                "History store error %d on %s %s: %s",
                response.status_code, method, url, msg,
            )
            raise TransportError(
                f"History store error {response.status_code}: {msg}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ContractMismatchError(
                f"History store returned non-JSON body: {e}"
            )


class LocalHistoryClient(HistoryClient):
    """
    History client that calls PlayHistoryService in this process.

    Each call runs in a worker thread, inside an application context of
    the given Flask app.
    """

    def __init__(self, app):
        self._app = app

    async def _run(self, operation: str, func, *args):
        return await asyncio.to_thread(
            self._run_in_context, operation, func, *args
        )

    def _run_in_context(self, operation: str, func, *args):
        from neosynth.services import PlayHistoryError

        with self._app.app_context():
            try:
                return func(*args)
            except PlayHistoryError as e:
                logger.warning("History store failed to %s: %s", operation, e)
                raise TransportError(f"History store failed to {operation}: {e}")

    async def record_play(self, user_id, track_url, track_name, session_id):
        from neosynth.services import PlayHistoryService

        def _record():
            return PlayHistoryService.record_play(
                user_id, track_url, track_name, session_id
            ).play_count

        return await self._run("record play", _record)

    async def get_play_history(self, user_id, track_urls):
        from neosynth.services import PlayHistoryService

        if not track_urls:
            return {}
        raw = await self._run(
            "fetch history",
            PlayHistoryService.get_play_history,
            user_id,
            track_urls,
        )
        return {
            url: HistoryEntry(
                play_count=entry["play_count"],
                played_in_current_session=entry["played_in_current_session"],
            )
            for url, entry in raw.items()
        }

    async def reset_session(self, user_id, session_id):
        from neosynth.services import PlayHistoryService

        await self._run(
            "reset session",
            PlayHistoryService.reset_session,
            user_id,
            session_id,
        )

    async def get_statistics(self, user_id):
        from neosynth.services import PlayHistoryService

        stats = await self._run(
            "compute statistics", PlayHistoryService.get_statistics, user_id
        )
        return ShuffleStatistics(**stats)

    async def clear_history(self, user_id):
        from neosynth.services import PlayHistoryService

        return await self._run(
            "clear history", PlayHistoryService.clear_history, user_id
        )
