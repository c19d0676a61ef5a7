"""
In-memory dictionary store.

Ephemeral backend for tests and one-off runs; nothing survives the process.
"""

from __future__ import annotations

from labnotify.storage.base import KeyValueStore


class DictStore(KeyValueStore):
    """Dictionary-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> bool:
        if key in self._data:
            del self._data[key]
            return True
        return False
