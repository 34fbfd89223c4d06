"""Per-call overrides and the values derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator


class CallOptions(BaseModel):
    """Overrides for a single call.

    Fields not declared here (``follow_redirects``, ``mode`` and so on) are
    kept as extras and forwarded to the transport.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    method: str | None = None
    data: Any = None
    headers: dict[str, Any] | None = None
    timeout: int | float | None = None
    response_type: str | None = None

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str | None) -> str | None:
        return value.upper() if value else value

    @field_validator("headers", mode="before")
    @classmethod
    def _lower_headers(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {str(key).lower(): item for key, item in value.items()}
        return value

    @property
    def passthrough(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


def coerce_call_options(options: CallOptions | Mapping[str, Any] | None = None, **overrides: Any) -> CallOptions:
    if isinstance(options, CallOptions):
        base = {name: getattr(options, name) for name in options.model_fields_set}
        base.update(options.model_extra or {})
    elif options is None:
        base = {}
    else:
        base = dict(options)
    base.update(overrides)
    return CallOptions(**base)


@dataclass(frozen=True)
class ResolvedRequest:
    url: str
    path: str
    method: str
    headers: Mapping[str, Any]
    body: Any = None
    has_body: bool = False
    timeout: float | None = None
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class CallInfo:
    """What after-response and error hooks are told about the call."""

    prefix: str
    url: str
    options: Mapping[str, Any]
