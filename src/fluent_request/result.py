"""Success-or-error value passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from .exceptions import RequestError, normalize_error

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: RequestError | None = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: BaseException) -> "Result[Any]":
        return cls(error=normalize_error(error))

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def then(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        if self.error is not None:
            return self  # type: ignore[return-value]
        try:
            return fn(self.value)  # type: ignore[arg-type]
        except Exception as exc:
            return Result.fail(exc)

    async def then_async(self, fn: Callable[[T], Awaitable["Result[U]"]]) -> "Result[U]":
        if self.error is not None:
            return self  # type: ignore[return-value]
        try:
            return await fn(self.value)  # type: ignore[arg-type]
        except Exception as exc:
            return Result.fail(exc)
