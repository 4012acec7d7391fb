import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from espotifai.domain.entities import AddResult, MusicInfo, Playlist
from espotifai.domain.errors import Duplicate, NotFound, StorageError

logger = logging.getLogger(__name__)


class _StoredPlaylist:
    """Mutable playlist record kept inside the store."""

    def __init__(self, name: str, owner: str, musics: Optional[List[MusicInfo]] = None):
        self.name = name
        self.owner = owner
        self.musics = musics or []

    def snapshot(self) -> Playlist:
        return Playlist(name=self.name, owner=self.owner, track_count=len(self.musics))

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "owner": self.owner,
            "musics": [music.to_json() for music in self.musics],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "_StoredPlaylist":
        return cls(
            name=data["name"],
            owner=data.get("owner", ""),
            musics=[MusicInfo.from_json(m) for m in data.get("musics", [])],
        )


class LocalPlaylistManager:
    """Playlist store persisted to a JSON file.

    Without a path the store lives in memory only. All operations are guarded
    by a lock so the manager can be shared between threads.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._lock = threading.RLock()
        self._playlists: Optional[Dict[str, _StoredPlaylist]] = None

    def create(self, name: str, owner: str) -> Playlist:
        with self._lock:
            playlists = self._load()
            if name in playlists:
                raise Duplicate(f"Playlist '{name}' already exists")

            stored = _StoredPlaylist(name, owner)
            playlists[name] = stored
            try:
                self._save()
            except StorageError:
                del playlists[name]
                raise

            logger.info(f"Created playlist '{name}' for owner '{owner}'")
            return stored.snapshot()

    def add_track(self, playlist_name: str, music: MusicInfo) -> AddResult:
        with self._lock:
            stored = self._get(playlist_name)
            if music in stored.musics:
                raise Duplicate(f"'{music.title}' is already in playlist '{playlist_name}'")

            stored.musics.append(music)
            try:
                self._save()
            except StorageError:
                stored.musics.pop()
                raise

            logger.info(f"Added '{music.title}' to playlist '{playlist_name}'")
            return AddResult(playlist=playlist_name, music=music, track_count=len(stored.musics))

    def list_tracks(self, playlist_name: str) -> List[MusicInfo]:
        with self._lock:
            return list(self._get(playlist_name).musics)

    def list_playlists(self) -> List[Playlist]:
        with self._lock:
            return [stored.snapshot() for stored in self._load().values()]

    def _get(self, playlist_name: str) -> _StoredPlaylist:
        stored = self._load().get(playlist_name)
        if stored is None:
            raise NotFound(f"Playlist '{playlist_name}' not found")
        return stored

    def _load(self) -> Dict[str, _StoredPlaylist]:
        if self._playlists is not None:
            return self._playlists

        playlists: Dict[str, _StoredPlaylist] = {}
        if self.path and self.path.exists():
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                for item in data.get("playlists", []):
                    stored = _StoredPlaylist.from_json(item)
                    playlists[stored.name] = stored
            except (json.JSONDecodeError, IOError, KeyError, TypeError, AttributeError) as e:
                raise StorageError(f"Failed to load playlists from {self.path}: {e}")
            logger.debug(f"Loaded {len(playlists)} playlists from {self.path}")

        self._playlists = playlists
        return playlists

    def _save(self) -> None:
        if not self.path:
            return

        data = {"playlists": [stored.to_json() for stored in self._playlists.values()]}
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.path)
        except OSError as e:
            try:
                if tmp_path.exists():
                    tmp_path.unlink()
            except OSError as cleanup_error:
                logger.warning(f"Failed to remove {tmp_path}: {cleanup_error}")
            raise StorageError(f"Failed to save playlists to {self.path}: {e}")
