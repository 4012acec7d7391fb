from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failures reported to listeners."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    REMOTE_FAILURE = "remote_failure"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class Failure:
    """Failure notification payload carried by every listener's on_failure."""

    kind: ErrorKind
    reason: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.reason}"


class ApiError(Exception):
    """Base class for errors raised by collaborators."""

    kind = ErrorKind.REMOTE_FAILURE

    def to_failure(self) -> Failure:
        return Failure(kind=self.kind, reason=str(self) or self.kind.value)


class InvalidArgument(ApiError):
    """A required argument is missing or malformed."""

    kind = ErrorKind.INVALID_ARGUMENT


class NotFound(ApiError):
    """Requested playlist or track was not found."""

    kind = ErrorKind.NOT_FOUND


class Duplicate(ApiError):
    """Playlist name or playlist membership already exists."""

    kind = ErrorKind.DUPLICATE


class RemoteFailure(ApiError):
    """Network or platform-side failure."""

    kind = ErrorKind.REMOTE_FAILURE


class RateLimited(RemoteFailure):
    """Operation was rate limited by the platform. Includes suggested wait time in milliseconds."""

    def __init__(self, retry_after_ms: int, message: str = "Rate limited") -> None:
        super().__init__(message)
        self.retry_after_ms = retry_after_ms


class StorageError(RemoteFailure):
    """Local playlist store could not be read or written."""


class Unauthorized(ApiError):
    """Credentials or access token rejected by the platform."""

    kind = ErrorKind.UNAUTHORIZED
