"""
Pydantic schemas for request/response validation.

This module provides type-safe validation for the play history API.
"""

from pydantic import ValidationError

from .shuffle_requests import (
    RecordPlayRequest,
    ResetSessionRequest,
    HistoryQueryParams,
    TrackListQueryParams,
    validate_user_id,
)
from .history_payloads import (
    HistoryEntryPayload,
    RecordPlayResponse,
    ShuffleStatistics,
    ClearHistoryResponse,
)

__all__ = [
    # Exceptions
    "ValidationError",
    # Request schemas
    "RecordPlayRequest",
    "ResetSessionRequest",
    "HistoryQueryParams",
    "TrackListQueryParams",
    # Utility functions
    "validate_user_id",
    # Response payloads
    "HistoryEntryPayload",
    "RecordPlayResponse",
    "ShuffleStatistics",
    "ClearHistoryResponse",
]
