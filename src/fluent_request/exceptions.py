"""Exceptions raised by request calls."""

from __future__ import annotations

import enum
from typing import Any


class ErrorKind(str, enum.Enum):
    INVALID_URL = "InvalidURL"
    REQUEST_CANCELED = "RequestCanceled"
    TIMEOUT = "Timeout"
    HTTP_STATUS = "HTTPStatusError"
    NETWORK = "NetworkError"


class RequestError(Exception):
    """Base exception for every failed call.

    ``code`` mirrors the short error code surfaced to hooks: a string tag for
    client-side failures, the HTTP status for bad responses and ``0`` for
    anything unexpected.
    """

    name = "RequestError"
    kind: ErrorKind = ErrorKind.NETWORK
    default_code: str | int = 0

    def __init__(
        self,
        message: str,
        code: str | int | None = None,
        *,
        response: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = self.default_code if code is None else code
        self.response = response
        self.cause = cause

    @property
    def status_code(self) -> int | None:
        if isinstance(self.code, int) and not isinstance(self.code, bool) and self.code:
            return self.code
        return None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class InvalidURLError(RequestError):
    """Raised when the call target is not a string."""

    kind = ErrorKind.INVALID_URL
    default_code = "invalidURL"


class RequestCanceledError(RequestError):
    """Raised when a before-request hook vetoes the call."""

    kind = ErrorKind.REQUEST_CANCELED
    default_code = "requestCanceled"


class RequestTimeoutError(RequestError):
    """Raised when the timeout fires before the transport settles."""

    kind = ErrorKind.TIMEOUT
    default_code = "timeout"


class RequestHTTPStatusError(RequestError):
    """Raised for responses outside the 2xx range."""

    kind = ErrorKind.HTTP_STATUS


class RequestNetworkError(RequestError):
    """Raised for transport failures and any unexpected exception in a call."""

    kind = ErrorKind.NETWORK


def normalize_error(exc: BaseException) -> RequestError:
    """Return ``exc`` unchanged if it is a RequestError, else wrap it with code 0."""
    if isinstance(exc, RequestError):
        return exc
    error = RequestNetworkError(str(exc) or type(exc).__name__, 0, cause=exc)
    error.__cause__ = exc
    return error
