"""
Request validation schemas for the shuffle history endpoints.

Field aliases carry the camelCase names of the wire contract; Python code
uses the snake_case attribute names.
"""

import re
from typing import Annotated, List, Optional
from pydantic import BaseModel, Field, field_validator

from neosynth.enums import TrackSortField, SortOrder

TRACK_URL_PATTERN = re.compile(r"^(https?)://[^\s/$.?#].[^\s]*$")
MAX_USER_ID_LENGTH = 50
MAX_TRACK_NAME_LENGTH = 200


def validate_user_id(user_id: Optional[str]) -> str:
    """
    Validate and normalize a user id taken from the URL path.

    Raises:
        ValueError: If the id is empty or longer than 50 characters.
    """
    if not user_id or not isinstance(user_id, str):
        raise ValueError("Invalid user ID")
    user_id = user_id.strip()
    if not user_id or len(user_id) > MAX_USER_ID_LENGTH:
        raise ValueError("Invalid user ID")
    return user_id


class RecordPlayRequest(BaseModel):
    """Schema for recording that a track started playing."""

    track_url: str = Field(..., alias="trackUrl", max_length=2048)
    track_name: str = Field(..., alias="trackName")
    session_id: Optional[str] = Field(
        default=None, alias="sessionId", max_length=128
    )

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("track_url")
    @classmethod
    def validate_track_url(cls, v: str) -> str:
        """Ensure the track url is an http(s) url."""
        v = v.strip()
        if not TRACK_URL_PATTERN.match(v):
            raise ValueError(f"{v} is not a valid URL!")
        return v

    @field_validator("track_name")
    @classmethod
    def validate_track_name(cls, v: str) -> str:
        """Ensure the track name is present and not too long."""
        v = v.strip()
        if not v:
            raise ValueError("trackName is required")
        if len(v) > MAX_TRACK_NAME_LENGTH:
            raise ValueError(
                f"trackName must be at most {MAX_TRACK_NAME_LENGTH} characters"
            )
        return v

    @field_validator("session_id")
    @classmethod
    def validate_session_id(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank session id as no session."""
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ResetSessionRequest(BaseModel):
    """Schema for starting a new listening session."""

    session_id: Optional[str] = Field(
        default=None, alias="sessionId", max_length=128
    )

    class Config:
        extra = "ignore"
        populate_by_name = True


class HistoryQueryParams(BaseModel):
    """Query parameters for the history snapshot endpoint."""

    tracks: str = Field(
        ..., description="Comma-separated track urls to look up"
    )

    @field_validator("tracks")
    @classmethod
    def validate_tracks(cls, v: str) -> str:
        """Ensure at least one non-blank url is present."""
        if not any(part.strip() for part in v.split(",")):
            raise ValueError(
                "tracks parameter is required (comma-separated URLs)"
            )
        return v

    @property
    def track_urls(self) -> List[str]:
        """The requested urls, stripped, blanks dropped, order kept."""
        seen = set()
        urls = []
        for part in self.tracks.split(","):
            url = part.strip()
            if url and url not in seen:
                seen.add(url)
                urls.append(url)
        return urls


class TrackListQueryParams(BaseModel):
    """Query parameters for listing history records."""

    sort_by: TrackSortField = Field(
        default=TrackSortField.PLAY_COUNT, alias="sortBy"
    )
    order: SortOrder = SortOrder.DESC
    limit: Annotated[int, Field(ge=1, le=500)] = 50

    class Config:
        extra = "ignore"
        populate_by_name = True
