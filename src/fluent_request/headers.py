"""Header resolution for a single call."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from .config import normalize_headers


def resolve_headers(
    base: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
    with_headers: Callable[[], Any] | Mapping[str, Any] | None = None,
    header_resolver: Callable[[], Any] | None = None,
) -> dict[str, Any]:
    """Layer base, per-call, ``with_headers`` and resolver headers, later wins.

    Results from callables are merged only when they are mappings. Neither
    ``base`` nor ``overrides`` is mutated.
    """
    headers = normalize_headers(base)
    headers.update(normalize_headers(overrides))

    if callable(with_headers):
        extra = with_headers()
        if isinstance(extra, Mapping):
            headers.update(normalize_headers(extra))
    elif isinstance(with_headers, Mapping):
        headers.update(normalize_headers(with_headers))

    if header_resolver is not None:
        extra = header_resolver()
        if isinstance(extra, Mapping):
            headers.update(normalize_headers(extra))

    return headers
