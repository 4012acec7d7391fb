from __future__ import annotations

from concurrent.futures import Future
from typing import List, Protocol, Union

from .entities import AddResult, MusicInfo, Playlist


class Authenticator(Protocol):
    """Port for exchanging client credentials for an access token.

    Implementations either return the value directly or a Future resolving to it,
    and raise (or set on the future) an ApiError subclass on failure.
    """

    def authenticate(self, client_id: str, client_secret: str) -> Union[str, "Future[str]"]:
        """Return an access token for the given client credentials."""


class Searcher(Protocol):
    """Port for searching tracks on the streaming platform."""

    def search(self, token: str, query: str) -> Union[List[MusicInfo], "Future[List[MusicInfo]]"]:
        """Return tracks matching the query."""


class PlaylistManager(Protocol):
    """Port for the local playlist store."""

    def create(self, name: str, owner: str) -> Union[Playlist, "Future[Playlist]"]:
        """Create an empty playlist. Raises Duplicate if the name is taken."""

    def add_track(self, playlist_name: str, music: MusicInfo) -> Union[AddResult, "Future[AddResult]"]:
        """Append a track to a playlist. Raises NotFound if the playlist does not exist."""

    def list_tracks(self, playlist_name: str) -> Union[List[MusicInfo], "Future[List[MusicInfo]]"]:
        """Return the tracks of a playlist. Raises NotFound if the playlist does not exist."""

    def list_playlists(self) -> Union[List[Playlist], "Future[List[Playlist]]"]:
        """Return every stored playlist."""
