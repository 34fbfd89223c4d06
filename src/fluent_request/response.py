"""Status checking and parsing of transport responses."""

from __future__ import annotations

from typing import Any, Callable

from .exceptions import RequestHTTPStatusError
from .hooks import maybe_await
from .result import Result

RESPONSE_TYPE_ALIASES = {"formData": "form_data"}


def check_status(response: Any) -> Result[Any]:
    status = response.status
    if 200 <= status < 300:
        if status == 204:
            return Result.ok(None)
        return Result.ok(response)
    error = RequestHTTPStatusError(getattr(response, "status_text", "") or "", status, response=response)
    return Result.fail(error)


async def parse_response(
    response: Any,
    response_type: str,
    hook: Callable[..., Any] | None = None,
) -> Result[Any]:
    """Run the custom parser, else the response's own parser for ``response_type``."""
    if callable(hook):
        return Result.ok(await maybe_await(hook(response, response_type)))

    parser = getattr(response, RESPONSE_TYPE_ALIASES.get(response_type, response_type), None)
    if response is not None and callable(parser):
        return Result.ok(await maybe_await(parser()))
    return Result.ok(response)
