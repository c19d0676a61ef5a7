"""
Last-known status per request, mirrored to durable storage.

This table is the diffing baseline: whatever it holds for an id is what
the next cycle compares the fresh status against.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator

from labnotify.errors import StorageError
from labnotify.schema.request import RequestId
from labnotify.storage.base import KeyValueStore
from labnotify.storage.keys import states_key

logger = logging.getLogger(__name__)


class StateTable:
    """
    Map of request id -> most recently observed status.

    Entries are never removed on their own; only clear() (reset or
    logout) empties the table. Persisted as a list of [id, status] pairs.
    """

    def __init__(self, store: KeyValueStore, user_id: str | None = None):
        self._store = store
        self._user_id = user_id
        self._states: dict[RequestId, str] = {}

    @property
    def user_id(self) -> str | None:
        return self._user_id

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[RequestId]:
        return iter(self._states)

    def get(self, request_id: RequestId) -> str | None:
        return self._states.get(request_id)

    def set(self, request_id: RequestId, status: str) -> None:
        self._states[request_id] = status

    def update(self, pairs: Iterable[tuple[RequestId, str]]) -> None:
        for request_id, status in pairs:
            self._states[request_id] = status

    def as_dict(self) -> dict[RequestId, str]:
        """Snapshot copy of the table."""
        return dict(self._states)

    async def load(self, user_id: str) -> None:
        """
        Replace the in-memory table with the persisted one for user_id.

        Read or decode failures leave the table empty; they are logged,
        not raised.
        """
        self._user_id = user_id
        self._states = {}
        try:
            raw = await self._store.get(states_key(user_id))
        except StorageError as e:
            logger.warning("Could not load last states for %s: %s", user_id, e)
            return

        if not raw:
            return

        try:
            self._states = {request_id: status for request_id, status in json.loads(raw)}
        except (ValueError, TypeError) as e:
            logger.warning("Discarding unreadable last states for %s: %s", user_id, e)
            self._states = {}

    async def persist(self) -> bool:
        """Write the table to storage. Returns False if the write failed."""
        if self._user_id is None:
            return False
        payload = json.dumps([[request_id, status] for request_id, status in self._states.items()])
        try:
            await self._store.set(states_key(self._user_id), payload)
        except StorageError as e:
            logger.error("Could not save last states for %s: %s", self._user_id, e)
            return False
        return True

    async def clear(self) -> None:
        """Empty the table in memory and remove it from storage."""
        self._states = {}
        if self._user_id is None:
            return
        try:
            await self._store.remove(states_key(self._user_id))
        except StorageError as e:
            logger.error("Could not remove last states for %s: %s", self._user_id, e)

    def detach(self) -> None:
        """Forget the in-memory table and user (logout). Storage is untouched."""
        self._states = {}
        self._user_id = None
