"""
Response payload schemas for the play history contract.

Used on both sides of the wire: the routes serialize store results through
these models, and the HTTP history client validates what it receives with
them.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class HistoryEntryPayload(BaseModel):
    """One track's entry in a history snapshot."""

    play_count: int = Field(0, ge=0, alias="playCount")
    played_in_current_session: bool = Field(
        False, alias="playedInCurrentSession"
    )
    last_played: Optional[str] = Field(None, alias="lastPlayed")

    class Config:
        extra = "ignore"
        populate_by_name = True


class RecordPlayResponse(BaseModel):
    """Result of recording a play."""

    play_count: int = Field(..., ge=1, alias="playCount")
    last_played: Optional[str] = Field(None, alias="lastPlayed")
    message: str = "Play recorded successfully"

    class Config:
        extra = "ignore"
        populate_by_name = True


class ShuffleStatistics(BaseModel):
    """Aggregate play statistics for one user."""

    total_tracks: int = Field(0, ge=0, alias="totalTracks")
    total_plays: int = Field(0, ge=0, alias="totalPlays")
    avg_plays_per_track: float = Field(0.0, ge=0, alias="avgPlaysPerTrack")
    max_plays: int = Field(0, ge=0, alias="maxPlays")
    min_plays: int = Field(0, ge=0, alias="minPlays")
    tracks_played_in_session: int = Field(0, ge=0, alias="tracksPlayedInSession")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @classmethod
    def empty(cls) -> "ShuffleStatistics":
        """Statistics of a user with no history."""
        return cls()

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with the camelCase contract field names."""
        return self.model_dump(by_alias=True)


class ClearHistoryResponse(BaseModel):
    """Result of clearing a user's play history."""

    deleted_count: int = Field(..., ge=0, alias="deletedCount")
    message: str = "Play history cleared successfully"

    class Config:
        extra = "ignore"
        populate_by_name = True
