from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class MusicInfo:
    """Domain entity describing a single track on the streaming platform."""

    title: str
    artist: str = ""
    id: str = ""
    album: str = ""
    uri: str = ""
    duration_ms: int = 0

    def to_json(self) -> Dict[str, Any]:
        """Serialize music info to JSON."""
        return {
            "title": self.title,
            "artist": self.artist,
            "id": self.id,
            "album": self.album,
            "uri": self.uri,
            "duration_ms": self.duration_ms,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "MusicInfo":
        """Deserialize music info from JSON."""
        return cls(
            title=data["title"],
            artist=data.get("artist", ""),
            id=data.get("id", ""),
            album=data.get("album", ""),
            uri=data.get("uri", ""),
            duration_ms=int(data.get("duration_ms", 0)),
        )


@dataclass(frozen=True)
class Playlist:
    """Snapshot of a locally stored playlist."""

    name: str
    owner: str
    track_count: int = 0


@dataclass(frozen=True)
class AddResult:
    """Acknowledgement of a music being added to a playlist."""

    playlist: str
    music: MusicInfo
    track_count: int
