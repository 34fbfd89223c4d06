"""Body and query-string encoding keyed off the content type."""

from __future__ import annotations

import json
from typing import Any, Mapping

import httpx
from pydantic import BaseModel

from .forms import FormData

MULTIPART = "multipart/form-data"
JSON = "application/json"
URLENCODED = "application/x-www-form-urlencoded"


def _plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data


def encode_query(data: Any) -> str:
    """Render ``data`` as ``a=1&b=2``; strings are assumed to be encoded already."""
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    if isinstance(data, FormData):
        return str(httpx.QueryParams(data.items()))
    return str(httpx.QueryParams(_plain(data)))


def encode_json(data: Any) -> str:
    if isinstance(data, BaseModel):
        return data.model_dump_json()
    return json.dumps(data, separators=(",", ":"))


def is_get(method: str) -> bool:
    return method.upper() == "GET"


def encode_body(
    method: str,
    data: Any,
    headers: Mapping[str, Any],
) -> tuple[Any, bool, dict[str, Any]]:
    """Return ``(body, has_body, headers)`` for the call.

    The returned headers are a copy; the multipart branch drops
    ``content-type`` so the transport can add its own boundary.
    """
    headers = dict(headers)
    content_type = str(headers.get("content-type") or "")

    if MULTIPART in content_type or isinstance(data, FormData):
        headers.pop("content-type", None)
        if isinstance(data, FormData):
            body = data
        elif isinstance(data, (Mapping, BaseModel)):
            body = FormData(_plain(data))
        else:
            body = data
    elif data is None:
        body = None
    elif JSON in content_type:
        body = encode_json(data)
    elif URLENCODED in content_type:
        body = encode_query(data)
    else:
        body = data

    if is_get(method) or body is None:
        return None, False, headers
    return body, True, headers
