from __future__ import annotations

from typing import Optional

from espotifai.application.api_private import ApiPrivate
from espotifai.domain.entities import MusicInfo
from espotifai.domain.listeners import (
    AccessListener,
    AddMusicPlaylistListener,
    PlaylistListener,
    SearchMusicListener,
)
from espotifai.domain.ports import Authenticator, PlaylistManager, Searcher


class Api:
    """Main entry point of espotifai.

    Every operation reports its outcome through the listener it receives, calling
    exactly one of ``on_success`` / ``on_failure``. Nothing is returned and no
    error escapes a call.
    """

    def __init__(self,
                 auth: Optional[Authenticator] = None,
                 searcher: Optional[Searcher] = None,
                 mgr: Optional[PlaylistManager] = None):
        """Initialize the API.

        Args:
            auth: Spotify authenticator, defaults to SpotifyAuthenticator
            searcher: Spotify music searcher, defaults to SpotifySearcher
            mgr: Playlist manager, defaults to LocalPlaylistManager
        """
        if auth is None or searcher is None or mgr is None:
            from espotifai.crosscutting.config import get_secret_manager
            from espotifai.infrastructure.providers.spotify import SpotifyAuthenticator, SpotifySearcher
            from espotifai.infrastructure.storage.playlists import LocalPlaylistManager

            config = get_secret_manager()
            if auth is None:
                auth = SpotifyAuthenticator(timeout=config.get_request_timeout())
            if searcher is None:
                searcher = SpotifySearcher(
                    limit=config.get_search_limit(),
                    market=config.get_market(),
                    timeout=config.get_request_timeout(),
                )
            if mgr is None:
                mgr = LocalPlaylistManager(config.get_playlists_path())

        self._private = ApiPrivate(auth, searcher, mgr)

    def request_access(self, listener: AccessListener, client_id: str, client_secret: str) -> None:
        """Authenticate a client against the Spotify accounts service.

        Args:
            listener: Receives the access token
            client_id: Client's ID
            client_secret: Client's secret
        """
        self._private.request_access(listener, client_id, client_secret)

    def search_music(self, listener: SearchMusicListener, token: str, name: str) -> None:
        """Search for a music on the Spotify platform.

        Args:
            listener: Receives the list of MusicInfo found
            token: Access token obtained through request_access
            name: Name of the music
        """
        self._private.search_music(listener, token, name)

    def create_playlist(self, listener: PlaylistListener, name: str, owner: str) -> None:
        """Create an offline playlist.

        Args:
            listener: Receives the created Playlist
            name: Name of the playlist, unique in the store
            owner: Owner of the playlist
        """
        self._private.create_playlist(listener, name, owner)

    def add_music_to_playlist(self, listener: AddMusicPlaylistListener,
                              music: MusicInfo, playlist: str) -> None:
        """Add a music into an existing playlist.

        Args:
            listener: Receives an AddResult acknowledgement
            music: Information of the music
            playlist: Name of the playlist
        """
        self._private.add_music_to_playlist(listener, music, playlist)

    def list_playlist_musics(self, listener: PlaylistListener, playlist_name: str) -> None:
        """List the musics of a playlist.

        Args:
            listener: Receives the list of MusicInfo in the playlist
            playlist_name: Name of the playlist
        """
        self._private.list_playlist_musics(listener, playlist_name)

    def get_playlists(self, listener: PlaylistListener) -> None:
        """Get all playlists registered in the store.

        Args:
            listener: Receives the list of Playlist
        """
        self._private.get_playlists(listener)
