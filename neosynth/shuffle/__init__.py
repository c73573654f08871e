"""
Session-aware weighted shuffle engine.

This package picks the next track of a playlist so that rarely played
tracks are favoured and tracks heard in the current session are strongly
deprioritized, without ever excluding a track outright.

Architecture:
    - weights.py: compute_weights() and the rebalancing formula
    - selector.py: weighted_choice() roulette-wheel selection
    - session.py: SessionTracker for session id rotation
    - history_client.py: HistoryClient contract, HTTP and in-process clients
    - controller.py: ShuffleController, the player-facing API
    - exceptions.py: Exception hierarchy

Usage:
    from neosynth.shuffle import HttpHistoryClient, ShuffleController

    client = HttpHistoryClient("http://localhost:8000/api")
    controller = ShuffleController(client, user_id="user123")

    await controller.enable()
    next_index = await controller.select_next_track(candidates, playlist)
    await controller.record_play(playlist[next_index].url, playlist[next_index].name)
"""

from .exceptions import (
    HistoryClientError,
    TransportError,
    ContractMismatchError,
)
from .weights import (
    HistoryEntry,
    SESSION_PENALTY,
    MIN_WEIGHT,
    compute_weights,
)
from .selector import (
    NO_TRACK,
    Selection,
    select,
    uniform_choice,
    weighted_choice,
)
from .session import Session, SessionTracker, generate_session_id
from .history_client import (
    HistoryClient,
    HttpHistoryClient,
    LocalHistoryClient,
)
from .controller import ShuffleController

__all__ = [
    # Exceptions
    "HistoryClientError",
    "TransportError",
    "ContractMismatchError",
    # Weights
    "HistoryEntry",
    "SESSION_PENALTY",
    "MIN_WEIGHT",
    "compute_weights",
    # Selection
    "NO_TRACK",
    "Selection",
    "select",
    "uniform_choice",
    "weighted_choice",
    # Sessions
    "Session",
    "SessionTracker",
    "generate_session_id",
    # History clients
    "HistoryClient",
    "HttpHistoryClient",
    "LocalHistoryClient",
    # Controller
    "ShuffleController",
]
