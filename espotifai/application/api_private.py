from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional

from espotifai.crosscutting.logging import CorrelationContext, log_dispatch, log_error, log_with_fields
from espotifai.domain.entities import MusicInfo
from espotifai.domain.errors import ApiError, ErrorKind, Failure
from espotifai.domain.ports import Authenticator, PlaylistManager, Searcher

logger = logging.getLogger(__name__)

_UNSET = object()


class _Notifier:
    """Delivers exactly one outcome of a single facade call to its listener."""

    def __init__(self, operation: str, listener: Any, playlist: Optional[str] = None) -> None:
        self.operation = operation
        self.listener = listener
        self.playlist = playlist
        self._delivered = False

    def succeed(self, result: Any) -> None:
        self._deliver('success', result)

    def fail(self, failure: Failure) -> None:
        self._deliver('failure', failure)

    def fail_with(self, error: BaseException) -> None:
        if isinstance(error, ApiError):
            self.fail(error.to_failure())
            return
        log_error(logger, f"{self.operation} collaborator raised an unexpected error", error)
        reason = f"{type(error).__name__}: {error}" if str(error) else type(error).__name__
        self.fail(Failure(kind=ErrorKind.REMOTE_FAILURE, reason=reason))

    def resolve(self, future: "Future[Any]") -> None:
        """Done-callback for collaborators that answer with a Future."""
        if future.cancelled():
            self.fail(Failure(kind=ErrorKind.REMOTE_FAILURE, reason="operation was cancelled"))
            return
        error = future.exception()
        if error is not None:
            self.fail_with(error)
        else:
            self.succeed(future.result())

    def _deliver(self, outcome: str, payload: Any) -> None:
        if self._delivered:
            logger.error(f"{self.operation}: dropping second {outcome} notification")
            return
        self._delivered = True

        with CorrelationContext(operation=self.operation, playlist=self.playlist):
            if outcome == 'success':
                log_dispatch(logger, self.operation, outcome)
            else:
                log_dispatch(logger, self.operation, outcome, kind=payload.kind.value, reason=payload.reason)

            try:
                callback = getattr(self.listener, 'on_success' if outcome == 'success' else 'on_failure')
                callback(payload)
            except Exception as e:
                log_error(logger, f"{self.operation} listener raised while handling {outcome}", e)


class ApiPrivate:
    """Routes facade calls to the collaborators and their outcomes to listeners."""

    def __init__(self, auth: Authenticator, searcher: Searcher, mgr: PlaylistManager) -> None:
        self.auth = auth
        self.searcher = searcher
        self.mgr = mgr

    def request_access(self, listener, client_id: str, client_secret: str) -> None:
        self._dispatch(
            'RequestAccess', listener,
            lambda: self.auth.authenticate(client_id, client_secret),
            required={'client_id': client_id, 'client_secret': client_secret},
        )

    def search_music(self, listener, token: str, name: str) -> None:
        self._dispatch(
            'SearchMusic', listener,
            lambda: self.searcher.search(token, name),
            required={'token': token, 'name': name},
        )

    def create_playlist(self, listener, name: str, owner: str) -> None:
        self._dispatch(
            'CreatePlaylist', listener,
            lambda: self.mgr.create(name, owner),
            required={'name': name, 'owner': owner},
            playlist=name,
        )

    def add_music_to_playlist(self, listener, music: MusicInfo, playlist: str) -> None:
        self._dispatch(
            'AddMusicToPlaylist', listener,
            lambda: self.mgr.add_track(playlist, music),
            required={'playlist': playlist},
            music=music,
            playlist=playlist,
        )

    def list_playlist_musics(self, listener, playlist_name: str) -> None:
        self._dispatch(
            'ListPlaylistMusics', listener,
            lambda: self.mgr.list_tracks(playlist_name),
            required={'playlist_name': playlist_name},
            playlist=playlist_name,
        )

    def get_playlists(self, listener) -> None:
        self._dispatch('GetPlaylists', listener, self.mgr.list_playlists)

    def _dispatch(self, operation: str, listener, call: Callable[[], Any],
                  required: Optional[Dict[str, Any]] = None,
                  music: Any = _UNSET,
                  playlist: Optional[str] = None) -> None:
        if not self._can_notify(listener):
            log_with_fields(logger, 'ERROR', f"{operation} called without a usable listener", {
                'operation': operation,
                'kind': ErrorKind.INVALID_ARGUMENT.value,
            })
            return

        notifier = _Notifier(operation, listener, playlist if isinstance(playlist, str) else None)

        failure = self._validate(required or {}, music)
        if failure is not None:
            notifier.fail(failure)
            return

        try:
            with CorrelationContext(operation=operation, playlist=notifier.playlist):
                result = call()
        except Exception as e:
            notifier.fail_with(e)
            return

        if isinstance(result, Future):
            result.add_done_callback(notifier.resolve)
        else:
            notifier.succeed(result)

    @staticmethod
    def _validate(required: Dict[str, Any], music: Any) -> Optional[Failure]:
        for name, value in required.items():
            if not isinstance(value, str) or not value.strip():
                return Failure(kind=ErrorKind.INVALID_ARGUMENT, reason=f"{name} must be a non-empty string")

        if music is not _UNSET:
            if not isinstance(music, MusicInfo):
                return Failure(kind=ErrorKind.INVALID_ARGUMENT, reason="music must be a MusicInfo")
            if not isinstance(music.title, str) or not music.title.strip():
                return Failure(kind=ErrorKind.INVALID_ARGUMENT, reason="music title must be a non-empty string")

        return None

    @staticmethod
    def _can_notify(listener) -> bool:
        return callable(getattr(listener, 'on_success', None)) and callable(getattr(listener, 'on_failure', None))
