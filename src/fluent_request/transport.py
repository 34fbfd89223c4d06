"""Transport dispatch and the default httpx-backed transport."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, Protocol, Union

import httpx

from .exceptions import RequestNetworkError, RequestTimeoutError
from .forms import FormData
from .hooks import maybe_await

logger = logging.getLogger(__name__)


class Response(Protocol):
    status: int
    status_text: str


Transport = Callable[[str, Mapping[str, Any]], Union[Awaitable[Any], Any]]


class HTTPXResponse:
    """Adapts ``httpx.Response`` to the parser-method response shape."""

    def __init__(self, response: httpx.Response) -> None:
        self.raw = response

    @property
    def status(self) -> int:
        return self.raw.status_code

    @property
    def status_text(self) -> str:
        return self.raw.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self.raw.headers

    @property
    def url(self) -> str:
        return str(self.raw.url)

    @property
    def ok(self) -> bool:
        return self.raw.is_success

    def json(self) -> Any:
        return self.raw.json()

    def text(self) -> str:
        return self.raw.text

    def blob(self) -> bytes:
        return self.raw.content

    def form_data(self) -> FormData:
        return FormData(httpx.QueryParams(self.raw.text).multi_items())

    def __repr__(self) -> str:
        return f"<HTTPXResponse [{self.status} {self.status_text}]>"


class HTTPXTransport:
    """Default transport: ``await transport(url, options)`` -> :class:`HTTPXResponse`."""

    browser_only_options = frozenset({"mode", "cache", "credentials"})
    forwarded_options = frozenset({"follow_redirects", "cookies", "auth", "extensions"})

    def __init__(
        self,
        *,
        httpx_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self._owns_client = httpx_client is None
        self._httpx = httpx_client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=follow_redirects,
            trust_env=False,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._httpx.aclose()

    def _request_kwargs(self, options: Mapping[str, Any]) -> dict[str, Any]:
        headers = {key: str(value) for key, value in (options.get("headers") or {}).items()}
        kwargs: dict[str, Any] = {"headers": headers}

        if "body" in options:
            body = options["body"]
            if isinstance(body, FormData):
                kwargs["files"] = body.to_httpx_files()
            elif isinstance(body, Mapping):
                kwargs["data"] = dict(body)
            elif isinstance(body, str):
                kwargs["content"] = body.encode("utf-8")
            elif body is not None:
                kwargs["content"] = body

        for key, value in options.items():
            if key in self.forwarded_options:
                kwargs[key] = value
            elif key not in {"method", "headers", "body"} | self.browser_only_options:
                logger.debug("Transport option %r is not supported by httpx, ignoring", key)
        return kwargs

    async def __call__(self, url: str, options: Mapping[str, Any]) -> HTTPXResponse:
        method = str(options.get("method") or "GET").upper()
        try:
            response = await self._httpx.request(method, url, **self._request_kwargs(options))
        except httpx.TransportError as exc:
            raise RequestNetworkError(str(exc) or "Network error", 0, cause=exc) from exc
        return HTTPXResponse(response)


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _forget(task: asyncio.Future[Any], background: set[asyncio.Future[Any]] | None) -> None:
    def on_done(done: asyncio.Future[Any]) -> None:
        if background is not None:
            background.discard(done)
        if done.cancelled():
            return
        exc = done.exception()
        if exc is not None:
            logger.debug("Transport call finished after timeout with %r", exc)

    if background is not None:
        background.add(task)
    task.add_done_callback(on_done)


async def invoke_transport(
    transport: Transport,
    url: str,
    options: Mapping[str, Any],
    timeout: float | None = None,
    background: set[asyncio.Future[Any]] | None = None,
) -> Any:
    """Call ``transport``, racing it against ``timeout`` milliseconds when set.

    A transport that loses the race is left running; it is parked in
    ``background`` until it finishes and its outcome is discarded.
    """
    if not _is_positive_number(timeout):
        return await maybe_await(transport(url, options))

    task = asyncio.ensure_future(maybe_await(transport(url, options)))
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    _forget(task, background)
    logger.warning("Request to %s timed out after %s ms", url, timeout)
    raise RequestTimeoutError(f"request timeout of {timeout} ms.")
