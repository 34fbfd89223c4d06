"""URL composition."""

from __future__ import annotations

import re

_ABSOLUTE_URL = re.compile(r"^(http|https|ftp)://")


def is_absolute_url(path: str) -> bool:
    return _ABSOLUTE_URL.match(path) is not None


def append_query(path: str, query: str) -> str:
    if not query:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{query}"


def compose_url(prefix: str, path: str) -> str:
    """Join ``prefix`` and ``path`` unless ``path`` is already absolute."""
    if is_absolute_url(path):
        return path
    return f"{prefix or ''}{path}"
