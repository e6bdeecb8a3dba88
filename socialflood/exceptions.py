"""Client-level error kinds and exception types.

Convention:
- Errors that abort a *whole* operation (an empty post package, a failed
  disconnect) are raised as ``SocialFloodError`` subclasses.
- Errors that belong to *one* platform during aggregation or publish
  fan-out are never raised past the fan-out boundary; they are captured
  as an ``ErrorKind`` plus a message on the corresponding snapshot or
  post variant.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable error categories shared by snapshots and variants."""

    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    VALIDATION_FAILED = "validation_failed"
    REMOTE_ERROR = "remote_error"
    NETWORK_ERROR = "network_error"

    # Validation detail kinds
    CONTENT_TOO_LONG = "content_too_long"
    TOO_MANY_MEDIA = "too_many_media"
    MISSING_REQUIRED_FIELD = "missing_required_field"


class SocialFloodError(Exception):
    """Base class for errors raised by the client core."""

    kind: ErrorKind = ErrorKind.REMOTE_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(SocialFloodError):
    """No session, or the session has expired (HTTP 401)."""

    kind = ErrorKind.UNAUTHENTICATED


class NotFound(SocialFloodError):
    """The connection id is unknown to the remote service."""

    kind = ErrorKind.NOT_FOUND


class Expired(SocialFloodError):
    """The connection can no longer be refreshed and must be re-authorized."""

    kind = ErrorKind.EXPIRED


class ValidationFailed(SocialFloodError):
    """Content or media limits were exceeded, or a required field is missing."""

    kind = ErrorKind.VALIDATION_FAILED


class EmptyPackageError(ValidationFailed):
    """Raised before fan-out when a post package has nothing to publish."""


class RemoteError(SocialFloodError):
    """The remote API answered with a non-2xx status or an unusable body."""

    kind = ErrorKind.REMOTE_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(SocialFloodError):
    """The request never completed (DNS, connect, timeout...)."""

    kind = ErrorKind.NETWORK_ERROR
