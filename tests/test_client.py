from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Mapping

import httpx
import pytest

from fluent_request import (
    REQUEST_METHODS,
    ErrorKind,
    FormData,
    InvalidURLError,
    Request,
    RequestCanceledError,
    RequestError,
    RequestHTTPStatusError,
    RequestNetworkError,
    RequestTimeoutError,
    create,
)


class StubResponse:
    def __init__(self, status: int = 200, status_text: str = "OK", payload: Any = None) -> None:
        self.status = status
        self.status_text = status_text
        self.payload = {"ok": True} if payload is None else payload

    def json(self) -> Any:
        return self.payload

    def text(self) -> str:
        return json.dumps(self.payload)


class StubTransport:
    def __init__(self, response: StubResponse | None = None) -> None:
        self.response = response or StubResponse()
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def __call__(self, url: str, options: Mapping[str, Any]) -> StubResponse:
        self.calls.append((url, dict(options)))
        return self.response


def test_get_folds_data_into_query_and_sends_no_body() -> None:
    transport = StubTransport()
    client = Request(transport=transport, prefix="https://api.example.com")

    result = asyncio.run(client.get("/items", {"a": 1, "b": 2}))

    assert result == {"ok": True}
    url, options = transport.calls[0]
    assert url == "https://api.example.com/items?a=1&b=2"
    assert options["method"] == "GET"
    assert "body" not in options


def test_get_appends_to_existing_query_string() -> None:
    transport = StubTransport()
    asyncio.run(Request(transport=transport).get("/items?page=2", {"a": 1}))
    assert transport.calls[0][0] == "/items?page=2&a=1"


def test_post_json_body_is_not_double_encoded() -> None:
    transport = StubTransport()
    asyncio.run(Request(transport=transport).post("/items", {"x": 1}))

    _, options = transport.calls[0]
    assert options["body"] == '{"x":1}'
    assert options["headers"]["content-type"] == "application/json"
    assert options["mode"] == "cors"
    assert options["cache"] == "no-cache"
    assert options["credentials"] == "include"


def test_multipart_call_drops_content_type_header() -> None:
    transport = StubTransport()
    client = Request(transport=transport).content_type("multipart")

    asyncio.run(client.post("/upload", {"name": "report", "size": 3}))

    _, options = transport.calls[0]
    assert isinstance(options["body"], FormData)
    assert options["body"].items() == [("name", "report"), ("size", 3)]
    assert "content-type" not in options["headers"]


def test_post_form_forces_urlencoded_body() -> None:
    transport = StubTransport()
    client = Request(transport=transport).header("X-Token", "t")

    asyncio.run(client.post_form("/login", {"user": "ann", "pin": 1234}))

    _, options = transport.calls[0]
    assert options["body"] == "user=ann&pin=1234"
    assert options["headers"]["content-type"] == "application/x-www-form-urlencoded;charset=UTF-8"
    assert options["headers"]["x-token"] == "t"


def test_get_form_puts_data_in_query() -> None:
    transport = StubTransport()
    asyncio.run(Request(transport=transport).get_form("/search", {"q": "cats"}))

    url, options = transport.calls[0]
    assert url == "/search?q=cats"
    assert "body" not in options


def test_absolute_url_ignores_prefix_and_relative_url_is_prefixed() -> None:
    transport = StubTransport()
    client = Request(transport=transport).set_prefix("https://api.example.com")

    asyncio.run(client.post("https://other.example.com/hook"))
    asyncio.run(client.post("/x"))

    assert [url for url, _ in transport.calls] == [
        "https://other.example.com/hook",
        "https://api.example.com/x",
    ]


def test_every_verb_dispatches_its_method() -> None:
    transport = StubTransport()
    client = Request(transport=transport)

    async def call_all() -> None:
        for method in REQUEST_METHODS:
            await getattr(client, method.lower())("/x")

    asyncio.run(call_all())
    assert [options["method"] for _, options in transport.calls] == list(REQUEST_METHODS)


def test_verb_method_wins_over_method_keyword() -> None:
    transport = StubTransport()
    client = Request(transport=transport)

    asyncio.run(client.get("/x", method="POST"))
    asyncio.run(client.post_form("/x", {"a": 1}, method="GET"))

    assert [options["method"] for _, options in transport.calls] == ["GET", "POST"]
    assert transport.calls[1][1]["body"] == "a=1"


def test_invalid_call_option_raises_request_error() -> None:
    transport = StubTransport()
    client = Request(transport=transport)

    with pytest.raises(RequestError) as excinfo:
        asyncio.run(client.get("/x", timeout="soon"))
    with pytest.raises(RequestError):
        asyncio.run(client.post_form("/x", {"a": 1}, timeout="soon"))

    assert excinfo.value.code == 0
    assert transport.calls == []


def test_send_accepts_mapping_and_keyword_options() -> None:
    transport = StubTransport()
    client = Request(transport=transport)

    asyncio.run(client.send("/x", {"method": "put", "data": {"a": 1}, "headers": {"X-Call": "1"}}))
    asyncio.run(client.send("/y", method="delete", follow_redirects=False))

    first, second = (options for _, options in transport.calls)
    assert first["method"] == "PUT"
    assert first["body"] == '{"a":1}'
    assert first["headers"]["x-call"] == "1"
    assert second["method"] == "DELETE"
    assert second["follow_redirects"] is False


def test_header_layers_apply_in_order() -> None:
    transport = StubTransport()
    client = (
        Request(transport=transport)
        .header({"X-Layer": "base", "Accept": "application/json"})
        .with_headers(lambda: {"x-layer": "with", "x-with": "1"})
        .header(lambda: {"x-layer": "resolver"})
    )

    asyncio.run(client.post("/x", options={"headers": {"X-Layer": "call"}}))

    headers = transport.calls[0][1]["headers"]
    assert headers["x-layer"] == "resolver"
    assert headers["x-with"] == "1"
    assert headers["accept"] == "application/json"
    assert client.config.headers["x-layer"] == "base"


def test_with_headers_accepts_a_mapping() -> None:
    transport = StubTransport()
    client = Request(transport=transport).with_headers({"Authorization": "Bearer abc"})

    asyncio.run(client.get("/me"))
    assert transport.calls[0][1]["headers"]["authorization"] == "Bearer abc"


def test_invalid_url_is_rejected() -> None:
    transport = StubTransport()
    with pytest.raises(InvalidURLError) as excinfo:
        asyncio.run(Request(transport=transport).get(42))

    assert excinfo.value.kind is ErrorKind.INVALID_URL
    assert excinfo.value.code == "invalidURL"
    assert transport.calls == []


def test_before_request_false_cancels_without_dispatch() -> None:
    transport = StubTransport()
    seen: dict[str, Any] = {}

    def veto(url: str, options: Mapping[str, Any]) -> bool:
        seen["url"] = url
        seen["body"] = options["body"]
        return False

    client = Request(transport=transport, prefix="/api").on_before_request(veto)

    with pytest.raises(RequestCanceledError) as excinfo:
        asyncio.run(client.post("/x", {"a": 1}))

    assert excinfo.value.kind is ErrorKind.REQUEST_CANCELED
    assert transport.calls == []
    assert seen == {"url": "/api/x", "body": '{"a":1}'}


def test_before_request_cannot_mutate_the_request() -> None:
    transport = StubTransport()

    def tamper(url: str, options: Mapping[str, Any]) -> None:
        with pytest.raises(TypeError):
            options["headers"]["x-evil"] = "1"  # type: ignore[index]
        return None

    asyncio.run(Request(transport=transport).on_before_request(tamper).get("/x"))
    assert "x-evil" not in transport.calls[0][1]["headers"]


def test_timeout_rejects_when_transport_never_settles() -> None:
    async def never(url: str, options: Mapping[str, Any]) -> Any:
        await asyncio.Event().wait()

    client = Request(transport=never).set_timeout(10)

    started = time.monotonic()
    with pytest.raises(RequestTimeoutError) as excinfo:
        asyncio.run(client.get("/slow"))

    assert time.monotonic() - started < 1.0
    assert excinfo.value.kind is ErrorKind.TIMEOUT
    assert "10" in excinfo.value.message


def test_timeout_message_keeps_integer_milliseconds() -> None:
    async def never(url: str, options: Mapping[str, Any]) -> Any:
        await asyncio.Event().wait()

    with pytest.raises(RequestTimeoutError) as excinfo:
        asyncio.run(Request(transport=never).get("/slow", timeout=10))

    assert excinfo.value.message == "request timeout of 10 ms."


def test_per_call_timeout_overrides_client_timeout() -> None:
    async def slow(url: str, options: Mapping[str, Any]) -> StubResponse:
        await asyncio.sleep(0.05)
        return StubResponse()

    client = Request(transport=slow).set_timeout(5)
    assert asyncio.run(client.get("/x", timeout=2000)) == {"ok": True}


def test_status_204_resolves_to_none() -> None:
    client = Request(transport=StubTransport(StubResponse(204, "No Content")))
    assert asyncio.run(client.delete("/x")) is None


def test_status_404_raises_with_response_attached() -> None:
    response = StubResponse(404, "Not Found")
    client = Request(transport=StubTransport(response))

    with pytest.raises(RequestHTTPStatusError) as excinfo:
        asyncio.run(client.get("/missing"))

    error = excinfo.value
    assert error.kind is ErrorKind.HTTP_STATUS
    assert error.code == 404
    assert error.status_code == 404
    assert error.message == "Not Found"
    assert error.response is response


def test_custom_parser_and_after_response_hook() -> None:
    seen: dict[str, Any] = {}

    def parse(response: StubResponse, response_type: str) -> str:
        seen["type"] = response_type
        return response.text()

    def after(value: str, info: Any) -> dict[str, Any]:
        seen["info"] = (info.prefix, info.url, info.options["method"])
        return {"wrapped": value}

    client = (
        Request(transport=StubTransport(), prefix="/api")
        .configure("response_type", "text")
        .with_response_parser(parse)
        .on_after_response(after)
    )

    result = asyncio.run(client.get("/x", {"q": 1}))

    assert result == {"wrapped": '{"ok": true}'}
    assert seen == {"type": "text", "info": ("/api", "/x?q=1", "GET")}


def test_response_type_selects_parser_method() -> None:
    client = Request(transport=StubTransport()).configure("response_type", "text")
    assert asyncio.run(client.get("/x")) == '{"ok": true}'


def test_response_without_matching_parser_is_returned_raw() -> None:
    response = StubResponse()
    client = Request(transport=StubTransport(response), response_type="blob")
    assert asyncio.run(client.get("/x")) is response


def test_unexpected_failure_is_normalized_with_code_zero() -> None:
    async def broken(url: str, options: Mapping[str, Any]) -> Any:
        raise ConnectionResetError("peer reset")

    seen: list[RequestError] = []

    def on_error(error: RequestError, info: Any) -> None:
        seen.append(error)

    client = Request(transport=broken).on_error(on_error)

    with pytest.raises(RequestNetworkError) as excinfo:
        asyncio.run(client.get("/x"))

    assert excinfo.value.code == 0
    assert excinfo.value.kind is ErrorKind.NETWORK
    assert isinstance(excinfo.value.cause, ConnectionResetError)
    assert seen == [excinfo.value]


def test_error_handler_returning_false_leaves_call_pending() -> None:
    client = Request(transport=StubTransport(StubResponse(500, "Server Error"))).on_error(
        lambda error, info: False
    )

    async def scenario() -> None:
        await asyncio.wait_for(client.get("/x"), timeout=0.05)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(scenario())


def test_config_changes_do_not_leak_into_in_flight_calls() -> None:
    transport = StubTransport()

    async def scenario() -> None:
        release = asyncio.Event()

        async def held(url: str, options: Mapping[str, Any]) -> StubResponse:
            await release.wait()
            return await transport(url, options)

        client = Request(transport=held).header("X-Version", "1")
        first = asyncio.ensure_future(client.get("/a"))
        await asyncio.sleep(0)
        client.header("X-Version", "2")
        second = asyncio.ensure_future(client.get("/b"))
        await asyncio.sleep(0)
        release.set()
        await asyncio.gather(first, second)

    asyncio.run(scenario())
    versions = {url: options["headers"]["x-version"] for url, options in transport.calls}
    assert versions == {"/a": "1", "/b": "2"}


def test_create_returns_independent_client() -> None:
    transport = StubTransport()
    parent = Request(transport=transport, prefix="/parent")
    child = parent.create(prefix="/child", transport=transport)
    other = create({"prefix": "/other"}, transport=transport)

    asyncio.run(child.get("/x"))
    asyncio.run(other.get("/x"))

    assert [url for url, _ in transport.calls] == ["/child/x", "/other/x"]
    assert parent.config.prefix == "/parent"


def _httpx_client(handler: Any) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_httpx_transport_sends_json_and_parses_response() -> None:
    captured: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content.decode())
        captured["content_type"] = request.headers["content-type"]
        return httpx.Response(201, json={"id": "it_1"}, request=request)

    async def scenario() -> Any:
        async with Request(prefix="https://api.example.com", httpx_client=_httpx_client(handler)) as client:
            return await client.post("/items", {"name": "widget"})

    assert asyncio.run(scenario()) == {"id": "it_1"}
    assert captured == {
        "method": "POST",
        "url": "https://api.example.com/items",
        "body": {"name": "widget"},
        "content_type": "application/json",
    }


def test_httpx_transport_builds_multipart_with_boundary() -> None:
    captured: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["content_type"] = request.headers["content-type"]
        captured["body"] = request.content
        return httpx.Response(200, text="stored", request=request)

    async def scenario() -> Any:
        client = Request(prefix="https://api.example.com", httpx_client=_httpx_client(handler))
        client.content_type("multipart").configure("response_type", "text")
        form = FormData({"title": "report"}).append("file", ("report.txt", b"hello", "text/plain"))
        return await client.post("/upload", form)

    assert asyncio.run(scenario()) == "stored"
    assert captured["content_type"].startswith("multipart/form-data; boundary=")
    assert b'name="title"' in captured["body"]
    assert b'filename="report.txt"' in captured["body"]
    assert b"hello" in captured["body"]


def test_httpx_transport_wraps_connection_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = Request(prefix="https://api.example.com", httpx_client=_httpx_client(handler))

    with pytest.raises(RequestNetworkError) as excinfo:
        asyncio.run(client.get("/x"))

    assert excinfo.value.code == 0
    assert isinstance(excinfo.value.cause, httpx.ConnectError)


def test_httpx_response_status_error_carries_status_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "nope"}, request=request)

    client = Request(prefix="https://api.example.com", httpx_client=_httpx_client(handler))

    with pytest.raises(RequestHTTPStatusError) as excinfo:
        asyncio.run(client.get("/missing"))

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Not Found"
    assert excinfo.value.response.json() == {"error": "nope"}
