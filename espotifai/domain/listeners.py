from __future__ import annotations

from typing import List, Protocol, Union

from .entities import AddResult, MusicInfo, Playlist
from .errors import Failure


class AccessListener(Protocol):
    """Receives the outcome of a RequestAccess call."""

    def on_success(self, token: str) -> None:
        """Called with the access token."""

    def on_failure(self, failure: Failure) -> None:
        """Called when access could not be granted."""


class SearchMusicListener(Protocol):
    """Receives the outcome of a SearchMusic call."""

    def on_success(self, musics: List[MusicInfo]) -> None:
        """Called with the tracks found."""

    def on_failure(self, failure: Failure) -> None:
        """Called when the search failed."""


class PlaylistListener(Protocol):
    """Receives the outcome of CreatePlaylist, ListPlaylistMusics and GetPlaylists.

    The success payload is the created Playlist, the playlist's tracks or every
    stored playlist, depending on the call it was passed to.
    """

    def on_success(self, result: Union[Playlist, List[MusicInfo], List[Playlist]]) -> None:
        """Called with the operation result."""

    def on_failure(self, failure: Failure) -> None:
        """Called when the playlist operation failed."""


class AddMusicPlaylistListener(Protocol):
    """Receives the outcome of an AddMusicToPlaylist call."""

    def on_success(self, ack: AddResult) -> None:
        """Called once the track is part of the playlist."""

    def on_failure(self, failure: Failure) -> None:
        """Called when the track could not be added."""
