"""
Base interface for durable key-value backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """
    Abstract string-keyed storage.

    Values are opaque strings (callers serialize to JSON). Implementations
    raise StorageError for backend failures; a missing key is not an error.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open the backend (create tables, files, etc.)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        pass

    async def remove_many(self, keys: list[str]) -> int:
        """Remove several keys. Returns count of removed entries."""
        count = 0
        for key in keys:
            if await self.remove(key):
                count += 1
        return count
