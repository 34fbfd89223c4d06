"""Per-client option store."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)

PREFIX_ENV_VAR = "FLUENT_REQUEST_PREFIX"
TIMEOUT_ENV_VAR = "FLUENT_REQUEST_TIMEOUT"

CONTENT_TYPE_ALIASES = {
    "json": "application/json",
    "form": "application/x-www-form-urlencoded;charset=UTF-8",
    "urlencoded": "application/x-www-form-urlencoded;charset=UTF-8",
    "multipart": "multipart/form-data",
}

HOOK_NAMES = frozenset(
    {"before_request", "after_response", "error_handle", "with_headers", "parse_response"}
)


def normalize_headers(headers: Mapping[str, Any] | None) -> dict[str, Any]:
    if not headers:
        return {}
    return {str(key).lower(): value for key, value in headers.items()}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _default_headers() -> dict[str, Any]:
    return {"content-type": "application/json"}


@dataclass
class ClientConfig:
    """Mutable option set owned by one client.

    ``timeout`` is in milliseconds. Keys passed to :meth:`configure` that are
    not fields are kept in ``extra`` and forwarded to the transport.
    """

    method: str = "POST"
    mode: str = "cors"
    cache: str = "no-cache"
    credentials: str = "include"
    headers: dict[str, Any] = field(default_factory=_default_headers)
    response_type: str = "json"
    prefix: str = ""
    before_request: Callable[..., Any] | None = None
    parse_response: Callable[..., Any] | None = None
    after_response: Callable[..., Any] | None = None
    error_handle: Callable[..., Any] | None = None
    with_headers: Callable[[], Any] | Mapping[str, Any] | None = None
    header_resolver: Callable[[], Any] | None = None
    timeout: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.headers = normalize_headers(self.headers)

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> "ClientConfig":
        config = cls()
        if options:
            config.configure(options)
        return config

    @classmethod
    def from_env(cls, options: Mapping[str, Any] | None = None) -> "ClientConfig":
        config = cls()
        prefix = os.getenv(PREFIX_ENV_VAR)
        if prefix:
            config.set_prefix(prefix)
        raw_timeout = os.getenv(TIMEOUT_ENV_VAR)
        if raw_timeout:
            try:
                config.set_timeout(float(raw_timeout))
            except ValueError:
                logger.warning("Ignoring %s=%r: not a number", TIMEOUT_ENV_VAR, raw_timeout)
        if options:
            config.configure(options)
        return config

    def configure(self, key: str | Mapping[str, Any], value: Any = None) -> "ClientConfig":
        items = key.items() if isinstance(key, Mapping) else [(key, value)]
        names = {f.name for f in fields(self)}
        for name, item in items:
            if name == "headers":
                self.headers = normalize_headers(item)
            elif name in names and name != "extra":
                setattr(self, name, item)
            else:
                self.extra[name] = item
        return self

    def set_prefix(self, prefix: Any) -> "ClientConfig":
        if prefix and isinstance(prefix, str):
            self.prefix = prefix
        return self

    def set_timeout(self, timeout: Any) -> "ClientConfig":
        if _is_number(timeout) and timeout > 0:
            self.timeout = timeout
        return self

    def set_hook(self, name: str, fn: Any) -> "ClientConfig":
        if name not in HOOK_NAMES:
            raise ValueError(f"Unknown hook: {name}")
        if callable(fn):
            setattr(self, name, fn)
        return self

    def set_header(self, key: str, value: Any) -> "ClientConfig":
        self.headers[str(key).lower()] = value
        return self

    def set_headers(self, headers: Mapping[str, Any]) -> "ClientConfig":
        self.headers.update(normalize_headers(headers))
        return self

    def set_header_resolver(self, fn: Any) -> "ClientConfig":
        if callable(fn):
            self.header_resolver = fn
        return self

    def set_content_type(self, alias: str) -> "ClientConfig":
        self.headers["content-type"] = CONTENT_TYPE_ALIASES.get(alias, alias)
        return self

    def snapshot(self) -> "ClientConfig":
        """Copy that shares no mutable maps with the live store."""
        return replace(self, headers=dict(self.headers), extra=dict(self.extra))
