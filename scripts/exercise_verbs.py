#!/usr/bin/env python3
"""Integration check: send every verb through Request against a live echo server."""

from __future__ import annotations

import asyncio
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from fluent_request import REQUEST_METHODS, Request, RequestError, RequestTimeoutError

BASE_URL = os.getenv("FLUENT_REQUEST_PREFIX", "http://localhost:8080")


@dataclass
class Tally:
    outcomes: dict[str, str] = field(default_factory=dict)

    async def check(
        self,
        label: str,
        call: Callable[[], Awaitable[Any]],
        *,
        expected_status: frozenset[int] = frozenset(),
        expected_kind: type[RequestError] | None = None,
    ) -> None:
        try:
            value = await call()
        except RequestError as exc:
            accepted = exc.status_code in expected_status or (
                expected_kind is not None and isinstance(exc, expected_kind)
            )
            self.outcomes[label] = "ok" if accepted else f"error: {exc}"
        else:
            self.outcomes[label] = "ok" if expected_kind is None else f"expected {expected_kind.__name__}, got {value!r}"
        print(f"  {label:<10} {self.outcomes[label]}")

    @property
    def failures(self) -> list[str]:
        return [label for label, outcome in self.outcomes.items() if outcome != "ok"]


async def main() -> int:
    tally = Tally()
    async with Request(prefix=BASE_URL, timeout=15000) as client:
        print(f"verbs against {BASE_URL}")
        for method in REQUEST_METHODS:
            verb = getattr(client, method.lower())
            await tally.check(method, lambda: verb("/anything", {"verb": method}), expected_status={404, 405})

        print("forms")
        await tally.check("get_form", lambda: client.get_form("/anything", {"q": "x"}), expected_status={404, 405})
        await tally.check("post_form", lambda: client.post_form("/anything", {"q": "x"}), expected_status={404, 405})

        print("timeout")
        await tally.check("timeout", lambda: client.get("/delay/2", timeout=50), expected_kind=RequestTimeoutError)

    print(f"{len(tally.outcomes) - len(tally.failures)} ok, {len(tally.failures)} failed")
    return 1 if tally.failures else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
