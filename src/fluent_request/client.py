"""Fluent asynchronous request client."""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from .config import CONTENT_TYPE_ALIASES, ClientConfig
from .encoding import encode_body, encode_query, is_get
from .exceptions import (
    InvalidURLError,
    RequestCanceledError,
    RequestError,
    normalize_error,
)
from .headers import resolve_headers
from .hooks import run_after_response, run_before_request, run_error_handle
from .request_options import CallInfo, CallOptions, ResolvedRequest, coerce_call_options
from .response import check_status, parse_response
from .result import Result
from .security import sanitize_headers
from .transport import HTTPXTransport, Transport, invoke_transport
from .urls import append_query, compose_url

logger = logging.getLogger(__name__)

REQUEST_METHODS = ("GET", "POST", "HEAD", "DELETE", "OPTIONS", "PUT", "PATCH")

FORM_CONTENT_TYPE = CONTENT_TYPE_ALIASES["form"]

OptionsArg = Optional[Union[CallOptions, Mapping[str, Any]]]


class Request:
    """Configurable request builder.

    Examples:

        client = Request(prefix="https://api.example.com").set_timeout(5000)
        client.header("Authorization", "Bearer token").content_type("json")
        user = await client.get("/users/1")

    Every call works on a snapshot of the client options taken when the
    call starts, so setters only affect calls made afterwards.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        transport: Transport | None = None,
        httpx_client: Any = None,
        from_env: bool = False,
        **kwargs: Any,
    ) -> None:
        merged = {**(options or {}), **kwargs}
        self._config = ClientConfig.from_env(merged) if from_env else ClientConfig.from_options(merged)
        self._owns_transport = transport is None
        self._transport: Transport = transport or HTTPXTransport(httpx_client=httpx_client)
        self._background: set[asyncio.Future[Any]] = set()

    def create(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> "Request":
        """Return a new, independent client."""
        return type(self)(options, **kwargs)

    async def __aenter__(self) -> "Request":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        aclose = getattr(self._transport, "aclose", None)
        if self._owns_transport and callable(aclose):
            await aclose()

    @property
    def config(self) -> ClientConfig:
        """A copy of the current options."""
        return self._config.snapshot()

    # builder surface

    def configure(self, key: str | Mapping[str, Any], value: Any = None) -> "Request":
        self._config.configure(key, value)
        return self

    def set_prefix(self, prefix: str) -> "Request":
        self._config.set_prefix(prefix)
        return self

    def set_timeout(self, timeout: float) -> "Request":
        self._config.set_timeout(timeout)
        return self

    def on_before_request(self, fn: Callable[..., Any]) -> "Request":
        self._config.set_hook("before_request", fn)
        return self

    def on_after_response(self, fn: Callable[..., Any]) -> "Request":
        self._config.set_hook("after_response", fn)
        return self

    def on_error(self, fn: Callable[..., Any]) -> "Request":
        self._config.set_hook("error_handle", fn)
        return self

    def with_response_parser(self, fn: Callable[..., Any]) -> "Request":
        self._config.set_hook("parse_response", fn)
        return self

    def with_headers(self, headers: Callable[[], Any] | Mapping[str, Any]) -> "Request":
        if isinstance(headers, Mapping):
            self._config.configure("with_headers", dict(headers))
        else:
            self._config.set_hook("with_headers", headers)
        return self

    def header(self, key: str | Mapping[str, Any] | Callable[[], Any], value: Any = None) -> "Request":
        """Set one header, several headers, or a function computing headers per call.

        Examples:

            .header("Accept", "application/json")
            .header({"Accept": "application/json"})
            .header(lambda: {"x-request-id": new_id()})
        """
        if isinstance(key, Mapping):
            self._config.set_headers(key)
        elif callable(key):
            self._config.set_header_resolver(key)
        else:
            self._config.set_header(key, value)
        return self

    def content_type(self, alias: str) -> "Request":
        self._config.set_content_type(alias)
        return self

    # call surface

    async def get(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._verb("GET", url, data, options, kwargs)

    async def post(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._verb("POST", url, data, options, kwargs)

    async def head(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._verb("HEAD", url, data, options, kwargs)

    async def delete(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._verb("DELETE", url, data, options, kwargs)

    async def options(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._verb("OPTIONS", url, data, options, kwargs)

    async def put(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._verb("PUT", url, data, options, kwargs)

    async def patch(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._verb("PATCH", url, data, options, kwargs)

    async def get_form(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._form("GET", url, data, options, kwargs)

    async def post_form(self, url: Any, data: Any = None, options: OptionsArg = None, **kwargs: Any) -> Any:
        return await self._form("POST", url, data, options, kwargs)

    async def _verb(self, method: str, url: Any, data: Any, options: OptionsArg, kwargs: dict[str, Any]) -> Any:
        return await self.send(url, options, **{**kwargs, "data": data, "method": method})

    async def _form(self, method: str, url: Any, data: Any, options: OptionsArg, kwargs: dict[str, Any]) -> Any:
        try:
            call = coerce_call_options(options, **{**kwargs, "data": data, "method": method})
        except Exception as exc:
            raise normalize_error(exc) from exc
        headers = {**(call.headers or {}), "content-type": FORM_CONTENT_TYPE}
        return await self.send(url, call, headers=headers)

    async def send(self, url: Any, options: OptionsArg = None, **kwargs: Any) -> Any:
        """Run one call through the full pipeline and return the parsed response.

        Raises :class:`RequestError` (or a subclass) on failure. When the
        error hook returns ``False`` the call never completes.
        """
        if not isinstance(url, str):
            raise InvalidURLError("invalid url")

        config = self._config.snapshot()
        try:
            call = coerce_call_options(options, **kwargs)
            resolved = self._resolve(url, config, call)
            proceed = await run_before_request(config.before_request, resolved.url, resolved.options)
        except RequestError:
            raise
        except Exception as exc:
            raise normalize_error(exc) from exc

        if not proceed:
            logger.debug("%s %s canceled by before_request hook", resolved.method, resolved.url)
            raise RequestCanceledError("request canceled by beforeRequest")

        info = CallInfo(prefix=config.prefix, url=resolved.path, options=resolved.options)
        response_type = call.response_type or config.response_type

        outcome = await self._execute(resolved, config, response_type, info)
        if outcome.is_ok:
            return outcome.value
        return await self._handle_error(outcome.error, config, info)

    def _resolve(self, url: str, config: ClientConfig, call: CallOptions) -> ResolvedRequest:
        method = (call.method or config.method).upper()
        headers = resolve_headers(config.headers, call.headers, config.with_headers, config.header_resolver)
        body, has_body, headers = encode_body(method, call.data, headers)

        path = url
        if is_get(method) and call.data:
            path = append_query(path, encode_query(call.data))

        frozen_headers = MappingProxyType(headers)
        options: dict[str, Any] = {
            "method": method,
            "mode": config.mode,
            "cache": config.cache,
            "credentials": config.credentials,
            **config.extra,
            **call.passthrough,
            "headers": frozen_headers,
        }
        if has_body:
            options["body"] = body

        return ResolvedRequest(
            path=path,
            url=compose_url(config.prefix, path),
            method=method,
            headers=frozen_headers,
            body=body,
            has_body=has_body,
            timeout=call.timeout if call.timeout is not None else config.timeout,
            options=MappingProxyType(options),
        )

    async def _execute(
        self,
        resolved: ResolvedRequest,
        config: ClientConfig,
        response_type: str,
        info: CallInfo,
    ) -> Result[Any]:
        logger.debug(
            "%s %s headers=%s timeout=%s",
            resolved.method,
            resolved.url,
            sanitize_headers(resolved.headers),
            resolved.timeout,
        )
        transport_options = {**resolved.options, "headers": dict(resolved.headers)}
        try:
            response = await invoke_transport(
                self._transport,
                resolved.url,
                transport_options,
                resolved.timeout,
                self._background,
            )
        except Exception as exc:
            return Result.fail(exc)

        async def parse(value: Any) -> Result[Any]:
            return await parse_response(value, response_type, config.parse_response)

        async def after(value: Any) -> Result[Any]:
            return Result.ok(await run_after_response(config.after_response, value, info))

        result = Result.ok(response).then(check_status)
        result = await result.then_async(parse)
        return await result.then_async(after)

    async def _handle_error(self, error: RequestError, config: ClientConfig, info: CallInfo) -> Any:
        if error.cause is not None and not isinstance(error.cause, RequestError) and error.code == 0:
            logger.warning("Request to %s failed: %r", info.url, error.cause)
        try:
            should_raise = await run_error_handle(config.error_handle, error, info)
        except Exception as exc:
            raise normalize_error(exc) from exc
        if should_raise:
            raise error
        logger.debug("Error %s suppressed by error handler; call left pending", error.kind.value)
        await asyncio.get_running_loop().create_future()


def create(options: Mapping[str, Any] | None = None, **kwargs: Any) -> Request:
    return Request(options, **kwargs)
