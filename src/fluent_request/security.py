"""Helpers for keeping credentials out of logs."""

from __future__ import annotations

from typing import Any, Collection, Mapping

REDACTED = "[REDACTED]"

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
    }
)


def _is_sensitive(name: str, sensitive: Collection[str]) -> bool:
    name = name.lower()
    return name in sensitive or name.endswith(("-token", "-secret"))


def sanitize_headers(
    headers: Mapping[str, Any],
    *,
    sensitive: Collection[str] = SENSITIVE_HEADERS,
) -> dict[str, Any]:
    """Copy of ``headers`` with credential values replaced, for debug logging.

    Besides the names in ``sensitive``, any ``*-token`` or ``*-secret`` header
    is masked.
    """
    return {name: REDACTED if _is_sensitive(name, sensitive) else value for name, value in headers.items()}
