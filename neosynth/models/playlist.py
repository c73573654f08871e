from typing import Dict, List, Any, Iterator
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Track:
    """A playable track. Identity is the url; names may repeat."""

    url: str
    name: str

    def __post_init__(self) -> None:
        if not self.url:
            logger.error("Track url is required")
            raise ValueError("Track url is required")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        """Build a Track from a playlist entry such as {'url', 'name'}."""
        return cls(url=data.get("url", ""), name=data.get("name") or "")

    def to_dict(self) -> Dict[str, Any]:
        """Convert Track to dictionary."""
        return {"url": self.url, "name": self.name}

    def __str__(self) -> str:
        return f"{self.name} <{self.url}>"


@dataclass
class Playlist:
    """Ordered tracks as the player shows them. Order is display-only."""

    name: str
    tracks: List[Track] = field(default_factory=list)

    @classmethod
    def from_dicts(
        cls, name: str, entries: List[Dict[str, Any]]
    ) -> "Playlist":
        """Build a Playlist from raw track dictionaries."""
        return cls(name=name, tracks=[Track.from_dict(e) for e in entries])

    def urls(self) -> List[str]:
        """Return all track urls in playlist order."""
        return [track.url for track in self.tracks]

    def to_dict(self) -> Dict[str, Any]:
        """Convert Playlist to dictionary."""
        return {
            "name": self.name,
            "tracks": [track.to_dict() for track in self.tracks],
        }

    def __len__(self) -> int:
        return len(self.tracks)

    def __getitem__(self, index: int) -> Track:
        return self.tracks[index]

    def __iter__(self) -> Iterator[Track]:
        return iter(self.tracks)

    def __str__(self) -> str:
        return f"{self.name} - {len(self.tracks)} tracks"
