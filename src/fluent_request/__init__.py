"""Fluent asynchronous HTTP request builder."""

from .client import REQUEST_METHODS, Request, create
from .config import CONTENT_TYPE_ALIASES, ClientConfig
from .exceptions import (
    ErrorKind,
    InvalidURLError,
    RequestCanceledError,
    RequestError,
    RequestHTTPStatusError,
    RequestNetworkError,
    RequestTimeoutError,
)
from .forms import FormData
from .request_options import CallInfo, CallOptions, ResolvedRequest
from .transport import HTTPXResponse, HTTPXTransport

__version__ = "0.1.0"

__all__ = [
    "CONTENT_TYPE_ALIASES",
    "REQUEST_METHODS",
    "CallInfo",
    "CallOptions",
    "ClientConfig",
    "ErrorKind",
    "FormData",
    "HTTPXResponse",
    "HTTPXTransport",
    "InvalidURLError",
    "Request",
    "RequestCanceledError",
    "RequestError",
    "RequestHTTPStatusError",
    "RequestNetworkError",
    "RequestTimeoutError",
    "ResolvedRequest",
    "create",
]
