import json
import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from espotifai.domain.entities import AddResult, MusicInfo, Playlist
from espotifai.domain.errors import Duplicate, NotFound, StorageError
from espotifai.infrastructure.storage.playlists import LocalPlaylistManager


SONG_A = MusicInfo(title="Song A", artist="X", id="t1", uri="spotify:track:t1", duration_ms=1000)
SONG_B = MusicInfo(title="Song B", artist="Y", id="t2")


class TestLocalPlaylistManager:
    """Tests for the JSON-backed playlist store."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = Path(self.temp_dir) / 'store' / 'playlists.json'
        self.mgr = LocalPlaylistManager(self.path)

    def teardown_method(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_missing_file_is_empty_store(self):
        assert self.mgr.list_playlists() == []
        assert not self.path.exists()

    def test_create_persists_to_disk(self):
        playlist = self.mgr.create("Road Trip", "alice")

        assert playlist == Playlist(name="Road Trip", owner="alice", track_count=0)
        with open(self.path) as f:
            data = json.load(f)
        assert data == {"playlists": [{"name": "Road Trip", "owner": "alice", "musics": []}]}

    def test_reload_from_disk(self):
        self.mgr.create("Road Trip", "alice")
        self.mgr.add_track("Road Trip", SONG_A)
        self.mgr.add_track("Road Trip", SONG_B)

        reloaded = LocalPlaylistManager(self.path)

        assert reloaded.list_playlists() == [Playlist(name="Road Trip", owner="alice", track_count=2)]
        assert reloaded.list_tracks("Road Trip") == [SONG_A, SONG_B]

    def test_duplicate_name(self):
        self.mgr.create("Road Trip", "alice")

        with pytest.raises(Duplicate):
            self.mgr.create("Road Trip", "bob")

        assert self.mgr.list_playlists() == [Playlist(name="Road Trip", owner="alice", track_count=0)]

    def test_names_are_case_sensitive(self):
        self.mgr.create("Road Trip", "alice")
        self.mgr.create("road trip", "bob")

        assert [p.name for p in self.mgr.list_playlists()] == ["Road Trip", "road trip"]

    def test_add_track_ack(self):
        self.mgr.create("Mix", "alice")

        ack = self.mgr.add_track("Mix", SONG_A)

        assert ack == AddResult(playlist="Mix", music=SONG_A, track_count=1)

    def test_add_same_track_twice(self):
        self.mgr.create("Mix", "alice")
        self.mgr.add_track("Mix", SONG_A)

        with pytest.raises(Duplicate):
            self.mgr.add_track("Mix", SONG_A)

        assert self.mgr.list_tracks("Mix") == [SONG_A]

    def test_add_to_missing_playlist(self):
        with pytest.raises(NotFound):
            self.mgr.add_track("NoSuchList", SONG_A)

        assert self.mgr.list_playlists() == []
        assert not self.path.exists()

    def test_corrupted_store(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json")

        with pytest.raises(StorageError):
            LocalPlaylistManager(self.path).list_playlists()

    def test_failed_save_rolls_back(self):
        self.mgr.create("Mix", "alice")

        with patch('espotifai.infrastructure.storage.playlists.json.dump', side_effect=OSError("disk full")):
            with pytest.raises(StorageError, match="disk full"):
                self.mgr.create("Other", "bob")
            with pytest.raises(StorageError):
                self.mgr.add_track("Mix", SONG_A)

        assert [p.name for p in self.mgr.list_playlists()] == ["Mix"]
        assert self.mgr.list_tracks("Mix") == []

    def test_failed_replace_removes_temp_file(self):
        self.mgr.create("Mix", "alice")

        with patch.object(Path, 'replace', side_effect=OSError("read-only filesystem")):
            with pytest.raises(StorageError, match="read-only filesystem"):
                self.mgr.create("Other", "bob")

        assert not self.path.with_name('playlists.json.tmp').exists()
        with open(self.path) as f:
            assert [p["name"] for p in json.load(f)["playlists"]] == ["Mix"]

    def test_failed_write_removes_temp_file(self):
        with patch('espotifai.infrastructure.storage.playlists.json.dump', side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                self.mgr.create("Mix", "alice")

        assert not self.path.with_name('playlists.json.tmp').exists()


def test_memory_only_store_never_touches_disk():
    mgr = LocalPlaylistManager()
    mgr.create("Mix", "alice")
    mgr.add_track("Mix", SONG_A)

    assert mgr.path is None
    assert mgr.list_tracks("Mix") == [SONG_A]
