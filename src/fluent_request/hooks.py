"""Invocation of user hooks around a call."""

from __future__ import annotations

import inspect
from typing import Any, Callable, Mapping

from .exceptions import RequestError
from .request_options import CallInfo


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def run_before_request(
    hook: Callable[..., Any] | None,
    url: str,
    options: Mapping[str, Any],
) -> bool:
    """Return False only when the hook returned exactly ``False``."""
    if not callable(hook):
        return True
    return (await maybe_await(hook(url, options))) is not False


async def run_after_response(hook: Callable[..., Any] | None, value: Any, info: CallInfo) -> Any:
    if not callable(hook):
        return value
    return await maybe_await(hook(value, info))


async def run_error_handle(hook: Callable[..., Any] | None, error: RequestError, info: CallInfo) -> bool:
    """Return True when ``error`` should be raised to the caller."""
    if not callable(hook):
        return True
    return (await maybe_await(hook(error, info))) is not False
