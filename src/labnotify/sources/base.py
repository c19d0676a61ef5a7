"""
Remote request source interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from labnotify.schema.request import Request


class RemoteRequestSource(ABC):
    """
    Fetches the current snapshot of a user's requests.

    Implementations raise TransportError for any failure; the caller
    skips the cycle and retries on the next tick.
    """

    @abstractmethod
    async def fetch_requests(self, owner_id: str) -> list[Request]:
        """Return the owner's requests in the order the API sends them."""
        pass

    async def close(self) -> None:
        """Release any held connections."""
        pass
