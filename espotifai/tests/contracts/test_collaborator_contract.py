from typing import Dict, List

import pytest

from espotifai.domain.entities import AddResult, MusicInfo, Playlist
from espotifai.domain.errors import ApiError, Duplicate, NotFound, Unauthorized
from espotifai.domain.ports import Authenticator, PlaylistManager, Searcher
from espotifai.infrastructure.storage.playlists import LocalPlaylistManager


class FakeAuthenticator(Authenticator):
    def __init__(self) -> None:
        self._clients = {"client": "secret"}

    def authenticate(self, client_id: str, client_secret: str) -> str:
        if self._clients.get(client_id) != client_secret:
            raise Unauthorized("invalid_client")
        return f"token-for-{client_id}"


class FakeSearcher(Searcher):
    def __init__(self) -> None:
        self._catalog = [
            MusicInfo(title="Imagine", artist="John Lennon", id="t1", uri="spotify:track:t1"),
            MusicInfo(title="Imagine Dragons Medley", artist="Cover Band", id="t2", uri="spotify:track:t2"),
            MusicInfo(title="Yesterday", artist="The Beatles", id="t3", uri="spotify:track:t3"),
        ]

    def search(self, token: str, query: str) -> List[MusicInfo]:
        if not token.startswith("token-for-"):
            raise Unauthorized("invalid token")
        return [m for m in self._catalog if query.lower() in m.title.lower()]


class FakePlaylistManager(PlaylistManager):
    def __init__(self) -> None:
        self._store: Dict[str, List[MusicInfo]] = {}
        self._owners: Dict[str, str] = {}

    def create(self, name: str, owner: str) -> Playlist:
        if name in self._store:
            raise Duplicate(name)
        self._store[name] = []
        self._owners[name] = owner
        return Playlist(name=name, owner=owner)

    def add_track(self, playlist_name: str, music: MusicInfo) -> AddResult:
        if playlist_name not in self._store:
            raise NotFound(playlist_name)
        self._store[playlist_name].append(music)
        return AddResult(playlist=playlist_name, music=music, track_count=len(self._store[playlist_name]))

    def list_tracks(self, playlist_name: str) -> List[MusicInfo]:
        if playlist_name not in self._store:
            raise NotFound(playlist_name)
        return list(self._store[playlist_name])

    def list_playlists(self) -> List[Playlist]:
        return [Playlist(name=n, owner=self._owners[n], track_count=len(t)) for n, t in self._store.items()]


def test_authenticate_then_search():
    token = FakeAuthenticator().authenticate("client", "secret")
    results = FakeSearcher().search(token, "imagine")

    assert [m.id for m in results] == ["t1", "t2"]
    assert all(isinstance(m, MusicInfo) for m in results)


def test_collaborator_errors_are_api_errors():
    with pytest.raises(ApiError):
        FakeAuthenticator().authenticate("client", "wrong")
    with pytest.raises(ApiError):
        FakeSearcher().search("garbage", "imagine")


@pytest.mark.parametrize("manager_factory", [FakePlaylistManager, LocalPlaylistManager])
class TestPlaylistManagerContract:
    """Semantics every playlist manager must honour."""

    def test_create_returns_playlist_ref(self, manager_factory):
        mgr = manager_factory()
        playlist = mgr.create("Road Trip", "alice")

        assert playlist.name == "Road Trip"
        assert playlist.owner == "alice"
        assert playlist.track_count == 0

    def test_names_are_unique(self, manager_factory):
        mgr = manager_factory()
        mgr.create("Road Trip", "alice")

        with pytest.raises(Duplicate):
            mgr.create("Road Trip", "bob")

    def test_add_and_list_preserve_order(self, manager_factory):
        mgr = manager_factory()
        mgr.create("Mix", "alice")
        first = MusicInfo(title="First", artist="A")
        second = MusicInfo(title="Second", artist="B")

        mgr.add_track("Mix", first)
        ack = mgr.add_track("Mix", second)

        assert ack.track_count == 2
        assert mgr.list_tracks("Mix") == [first, second]

    def test_missing_playlist(self, manager_factory):
        mgr = manager_factory()

        with pytest.raises(NotFound):
            mgr.add_track("Nope", MusicInfo(title="Song"))
        with pytest.raises(NotFound):
            mgr.list_tracks("Nope")
        assert list(mgr.list_playlists()) == []

    def test_list_tracks_returns_copy(self, manager_factory):
        mgr = manager_factory()
        mgr.create("Mix", "alice")
        tracks = mgr.list_tracks("Mix")
        tracks.append(MusicInfo(title="Injected"))

        assert mgr.list_tracks("Mix") == []
