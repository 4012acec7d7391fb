import dataclasses

import pytest

from espotifai.domain.entities import AddResult, MusicInfo, Playlist
from espotifai.domain.errors import (
    ApiError, Duplicate, ErrorKind, Failure, InvalidArgument, NotFound,
    RateLimited, RemoteFailure, StorageError, Unauthorized
)


class TestMusicInfo:

    def test_equal_fields_are_interchangeable(self):
        a = MusicInfo(title="Song A", artist="X", id="t1")
        b = MusicInfo(title="Song A", artist="X", id="t1")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_is_immutable(self):
        music = MusicInfo(title="Song A")

        with pytest.raises(dataclasses.FrozenInstanceError):
            music.title = "Song B"

    def test_json_round_trip(self):
        music = MusicInfo(title="Song A", artist="X", id="t1", album="Album",
                          uri="spotify:track:t1", duration_ms=180000)

        assert MusicInfo.from_json(music.to_json()) == music

    def test_from_json_tolerates_missing_optional_keys(self):
        music = MusicInfo.from_json({"title": "Only Title"})

        assert music == MusicInfo(title="Only Title")

    def test_from_json_requires_title(self):
        with pytest.raises(KeyError):
            MusicInfo.from_json({"artist": "X"})


def test_playlist_and_ack_are_values():
    music = MusicInfo(title="Song A")

    assert Playlist("Mix", "alice", 1) == Playlist(name="Mix", owner="alice", track_count=1)
    assert AddResult("Mix", music, 1) == AddResult(playlist="Mix", music=music, track_count=1)


class TestErrors:

    @pytest.mark.parametrize("error_class,kind", [
        (InvalidArgument, ErrorKind.INVALID_ARGUMENT),
        (NotFound, ErrorKind.NOT_FOUND),
        (Duplicate, ErrorKind.DUPLICATE),
        (RemoteFailure, ErrorKind.REMOTE_FAILURE),
        (StorageError, ErrorKind.REMOTE_FAILURE),
        (Unauthorized, ErrorKind.UNAUTHORIZED),
    ])
    def test_kind_mapping(self, error_class, kind):
        failure = error_class("boom").to_failure()

        assert failure == Failure(kind=kind, reason="boom")

    def test_rate_limited_carries_retry_after(self):
        error = RateLimited(1500)

        assert isinstance(error, RemoteFailure)
        assert error.retry_after_ms == 1500
        assert error.to_failure().reason == "Rate limited"

    def test_empty_message_falls_back_to_kind(self):
        assert ApiError().to_failure().reason == "remote_failure"

    def test_failure_str(self):
        assert str(Failure(ErrorKind.NOT_FOUND, "Playlist 'x' not found")) == "not_found: Playlist 'x' not found"
