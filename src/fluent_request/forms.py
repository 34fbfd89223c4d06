"""Multipart form payloads."""

from __future__ import annotations

from typing import Any, Iterator


class FormData:
    """Ordered multipart fields; a name may be appended more than once."""

    def __init__(self, fields: Any = None) -> None:
        self._entries: list[tuple[str, Any]] = []
        if fields:
            items = fields.items() if hasattr(fields, "items") else fields
            for name, value in items:
                self.append(name, value)

    def append(self, name: str, value: Any) -> "FormData":
        self._entries.append((str(name), value))
        return self

    def get(self, name: str, default: Any = None) -> Any:
        for key, value in self._entries:
            if key == name:
                return value
        return default

    def get_all(self, name: str) -> list[Any]:
        return [value for key, value in self._entries if key == name]

    def items(self) -> list[tuple[str, Any]]:
        return list(self._entries)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self._entries)

    def __repr__(self) -> str:
        return f"FormData({self._entries!r})"

    def to_httpx_files(self) -> list[tuple[str, Any]]:
        """Render as an httpx ``files=`` list so every field is sent as multipart."""
        files: list[tuple[str, Any]] = []
        for name, value in self._entries:
            if isinstance(value, tuple) or hasattr(value, "read"):
                files.append((name, value))
            elif isinstance(value, (bytes, bytearray)):
                files.append((name, (None, bytes(value))))
            else:
                files.append((name, (None, "" if value is None else str(value))))
        return files
