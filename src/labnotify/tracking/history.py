"""
Notification history, newest first, mirrored to durable storage.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from labnotify.errors import StorageError
from labnotify.schema.notification import NotificationRecord
from labnotify.storage.base import KeyValueStore
from labnotify.storage.keys import notifications_key

logger = logging.getLogger(__name__)


class NotificationHistory:
    """
    Ordered log of generated notifications.

    The whole collection is persisted after every mutation. Mutations on
    unknown ids are no-ops.
    """

    def __init__(self, store: KeyValueStore, user_id: str | None = None):
        self._store = store
        self._user_id = user_id
        self._records: list[NotificationRecord] = []

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def records(self) -> tuple[NotificationRecord, ...]:
        return tuple(self._records)

    @property
    def unread_count(self) -> int:
        return sum(1 for record in self._records if not record.read)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, notification_id: str) -> NotificationRecord | None:
        for record in self._records:
            if record.id == notification_id:
                return record
        return None

    async def load(self, user_id: str) -> None:
        """Replace the in-memory history with the persisted one (empty on failure)."""
        self._user_id = user_id
        self._records = []
        try:
            raw = await self._store.get(notifications_key(user_id))
        except StorageError as e:
            logger.warning("Could not load notifications for %s: %s", user_id, e)
            return

        if not raw:
            return

        try:
            self._records = [NotificationRecord.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning("Discarding unreadable notifications for %s: %s", user_id, e)
            self._records = []

    async def prepend(self, record: NotificationRecord) -> None:
        self._records.insert(0, record)
        await self.persist()

    async def mark_read(self, notification_id: str) -> bool:
        for i, record in enumerate(self._records):
            if record.id == notification_id:
                if not record.read:
                    self._records[i] = record.model_copy(update={"read": True})
                    await self.persist()
                return True
        return False

    async def mark_all_read(self) -> int:
        """Mark every unread record as read. Returns how many changed."""
        changed = 0
        for i, record in enumerate(self._records):
            if not record.read:
                self._records[i] = record.model_copy(update={"read": True})
                changed += 1
        if changed:
            await self.persist()
        return changed

    async def delete(self, notification_id: str) -> bool:
        remaining = [r for r in self._records if r.id != notification_id]
        if len(remaining) == len(self._records):
            return False
        self._records = remaining
        await self.persist()
        return True

    async def clear_all(self) -> None:
        """Drop every record; the empty collection is persisted."""
        self._records = []
        await self.persist()

    async def persist(self) -> bool:
        """Write the whole collection. Returns False if the write failed."""
        if self._user_id is None:
            return False
        payload = json.dumps([record.model_dump(mode="json") for record in self._records])
        try:
            await self._store.set(notifications_key(self._user_id), payload)
        except StorageError as e:
            logger.error("Could not save notifications for %s: %s", self._user_id, e)
            return False
        return True

    async def reset(self) -> None:
        """Empty the history in memory and remove the key from storage."""
        self._records = []
        if self._user_id is None:
            return
        try:
            await self._store.remove(notifications_key(self._user_id))
        except StorageError as e:
            logger.error("Could not remove notifications for %s: %s", self._user_id, e)

    def detach(self) -> None:
        """Forget the in-memory history and user (logout). Storage is untouched."""
        self._records = []
        self._user_id = None
