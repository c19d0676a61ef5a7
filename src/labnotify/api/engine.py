"""
High-level notification engine.

This is the entry point presentation code talks to. It owns the
per-session StateTable and NotificationHistory, wires the detector,
materializer and polling controller together, and manages the
permission-prompt state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from labnotify.config import Settings
from labnotify.detection.detector import ChangeDetector
from labnotify.detection.materializer import NotificationMaterializer
from labnotify.errors import PermissionDenied, StorageError, TransportError
from labnotify.polling.controller import DEFAULT_INTERVAL_SECONDS, PollingController
from labnotify.schema.notification import (
    NotificationRecord,
    PermissionStatus,
    TransitionEvent,
)
from labnotify.schema.request import Request, RequestStatus
from labnotify.sinks import NotificationSink, resolve_sink
from labnotify.sources.base import RemoteRequestSource
from labnotify.sources.http import HttpRequestSource
from labnotify.storage.base import KeyValueStore
from labnotify.storage.keys import (
    PERMISSION_ASKED_KEY,
    PERMISSION_GRANTED_KEY,
    PERMISSION_SKIPPED_KEY,
    notifications_key,
    states_key,
)
from labnotify.storage.sqlite_store import SQLiteStore
from labnotify.tracking.history import NotificationHistory
from labnotify.tracking.state_table import StateTable

logger = logging.getLogger(__name__)

TEST_REQUEST_ID = 999


class NotificationEngine:
    """
    Change-detection and notification-delivery engine for one user session.

    Usage:
        engine = NotificationEngine.from_settings(Settings.from_env())
        await engine.initialize()
        await engine.start_session("42")

        # The "home" view became visible: poll every interval
        await engine.set_visible(True)

        # Pull-to-refresh
        await engine.refresh()

        for record in engine.notifications:
            print(record.message)

        await engine.close()
    """

    def __init__(
        self,
        source: RemoteRequestSource,
        store: KeyValueStore,
        sink: NotificationSink | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        single_flight: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.source = source
        self.store = store
        self.sink = sink
        self._clock = clock

        self.state_table = StateTable(store)
        self.history = NotificationHistory(store)
        self.detector = ChangeDetector()
        self.materializer = NotificationMaterializer(
            self.history,
            sink,
            is_permitted=self._push_permitted,
            clock=clock,
        )
        self.polling = PollingController(
            self._poll_cycle,
            interval_seconds=interval_seconds,
            is_authenticated=lambda: self._user_id is not None,
            single_flight=single_flight,
        )

        self._user_id: str | None = None
        self._requests: list[Request] = []
        self._last_update: datetime | None = None
        self._permission_status: PermissionStatus | None = None
        self._show_permission_prompt = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: KeyValueStore | None = None,
        sink: NotificationSink | None = None,
        console: bool = False,
    ) -> NotificationEngine:
        """Build an engine with the HTTP source, SQLite store and resolved sink."""
        source = HttpRequestSource(
            settings.api_base_url,
            path=settings.requests_path,
            owner_param=settings.owner_param,
            timeout=settings.request_timeout_seconds,
        )
        return cls(
            source=source,
            store=store or SQLiteStore(settings.db_path),
            sink=sink or resolve_sink(settings, console=console),
            interval_seconds=settings.poll_interval_seconds,
            single_flight=settings.single_flight,
        )

    async def initialize(self) -> None:
        await self.store.initialize()

    async def close(self) -> None:
        """Stop polling, let in-flight cycles finish and release resources."""
        await self.polling.stop()
        await self.polling.wait_idle()
        await self.source.close()
        await self.store.close()

    # Read-only projections

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def requests(self) -> tuple[Request, ...]:
        return tuple(self._requests)

    @property
    def last_update(self) -> datetime | None:
        return self._last_update

    @property
    def is_polling(self) -> bool:
        return self.polling.is_running

    @property
    def notifications(self) -> tuple[NotificationRecord, ...]:
        return self.history.records

    @property
    def unread_count(self) -> int:
        return self.history.unread_count

    @property
    def permission_status(self) -> PermissionStatus | None:
        return self._permission_status

    @property
    def show_permission_prompt(self) -> bool:
        return self._show_permission_prompt

    # Session lifecycle

    async def start_session(self, user_id: str) -> None:
        """Load the user's persisted state, check permission, poll if visible."""
        if self._user_id is not None and self._user_id != user_id:
            await self.end_session()

        await self.load_persisted_state(user_id)
        await self.check_and_prompt_permission(user_id)
        if self.polling.user_visible:
            await self.polling.start()

    async def end_session(self) -> None:
        """Logout: stop polling and drop the in-memory state (storage is kept)."""
        await self.polling.stop()
        logger.info("Session for %s ended", self._user_id)
        self.state_table.detach()
        self.history.detach()
        self._user_id = None
        self._requests = []
        self._last_update = None
        self._show_permission_prompt = False

    async def load_persisted_state(self, user_id: str) -> None:
        """Populate the StateTable and history for user_id; failures load empty."""
        if user_id != self._user_id:
            self._requests = []
            self._last_update = None
        self._user_id = user_id
        await self.state_table.load(user_id)
        await self.history.load(user_id)
        logger.info(
            "Loaded %d states and %d notifications for %s",
            len(self.state_table),
            len(self.history),
            user_id,
        )

    # Polling

    async def set_visible(self, visible: bool) -> None:
        await self.polling.set_visible(visible)

    async def start_polling(self) -> bool:
        return await self.polling.start()

    async def stop_polling(self) -> None:
        await self.polling.stop()

    async def refresh(self) -> bool:
        """One manual cycle regardless of visibility. True if the fetch succeeded."""
        return bool(await self.polling.run_cycle())

    async def _poll_cycle(self) -> bool:
        """Fetch, detect, materialize and persist. Returns False if skipped."""
        user_id = self._user_id
        if user_id is None:
            return False

        try:
            fresh = await self.source.fetch_requests(user_id)
        except TransportError as e:
            logger.warning("Fetching requests failed, retrying next cycle: %s", e)
            return False

        if self._user_id != user_id:
            logger.info("Session changed while fetching, discarding results for %s", user_id)
            return False

        events = await self.detector.detect(self._requests, fresh, self.state_table)
        by_id = {request.id: request for request in fresh}
        for event in events:
            await self.materializer.materialize(event, by_id[event.request_id])

        self._requests = list(fresh)
        self._last_update = self._clock()
        return True

    # Reset

    async def reset_notification_state(self, user_id: str) -> None:
        """Clear the StateTable and history, in memory and in storage."""
        if user_id == self._user_id:
            await self.state_table.clear()
            await self.history.reset()
        else:
            try:
                await self.store.remove_many([states_key(user_id), notifications_key(user_id)])
            except StorageError as e:
                logger.error("Could not reset notification state for %s: %s", user_id, e)
        logger.info("Notification state reset for %s", user_id)

    async def reseed_from_current_snapshot(self) -> int:
        """
        Fill the StateTable from the held snapshot without emitting events.

        Returns the number of seeded requests.
        """
        self.state_table.update((request.id, request.status) for request in self._requests)
        if self._requests:
            await self.state_table.persist()
        return len(self._requests)

    async def restart_notifications(self) -> int:
        """
        Reset the current user's state, reseed it from the snapshot and
        reload both collections from storage.

        Returns the number of reseeded requests.
        """
        user_id = self._user_id
        if user_id is None:
            return 0
        await self.reset_notification_state(user_id)
        count = await self.reseed_from_current_snapshot()
        await self.load_persisted_state(user_id)
        return count

    # History

    async def mark_read(self, notification_id: str) -> None:
        await self.history.mark_read(notification_id)

    async def mark_all_read(self) -> None:
        await self.history.mark_all_read()

    async def delete_notification(self, notification_id: str) -> None:
        await self.history.delete(notification_id)

    async def clear_all(self) -> None:
        await self.history.clear_all()

    async def send_test_notification(self) -> NotificationRecord | None:
        """Push a synthetic pending -> approved change through the normal path."""
        probe = Request(
            id=TEST_REQUEST_ID,
            title="NOTIFICATION TEST",
            status=RequestStatus.APPROVED.value,
        )
        event = TransitionEvent(
            request_id=probe.id,
            previous_status=RequestStatus.PENDING.value,
            new_status=probe.status,
        )
        return await self.materializer.materialize(event, probe)

    # Permission

    def _push_permitted(self) -> bool:
        return self._permission_status == PermissionStatus.GRANTED

    async def _read_sink_permission(self) -> PermissionStatus:
        try:
            return await self.sink.get_permission_status()
        except Exception as e:
            logger.warning("Could not read notification permission: %s", e)
            return PermissionStatus.DENIED

    async def check_and_prompt_permission(self, user_id: str) -> bool:
        """
        Raise the permission prompt once per installation.

        The "asked" flag is recorded as soon as the prompt is raised,
        whatever the user answers. Returns True if the prompt was raised.
        """
        if self.sink is None:
            return False

        self._permission_status = await self._read_sink_permission()

        try:
            flags = [
                await self.store.get(PERMISSION_ASKED_KEY),
                await self.store.get(PERMISSION_GRANTED_KEY),
                await self.store.get(PERMISSION_SKIPPED_KEY),
            ]
        except StorageError as e:
            logger.warning("Could not read permission flags: %s", e)
            return False

        if any(flags):
            return False

        logger.info("Prompting %s for notification permission", user_id)
        self._show_permission_prompt = True
        await self._set_flag(PERMISSION_ASKED_KEY)
        return True

    async def request_permission(self) -> PermissionStatus:
        """
        Ask the sink for permission (only if not already granted).

        Raises PermissionDenied when there is no sink, the request fails or
        the user declines.
        """
        if self.sink is None:
            raise PermissionDenied("Notifications are not available on this device")

        try:
            status = await self.sink.get_permission_status()
            if status != PermissionStatus.GRANTED:
                status = await self.sink.request_permission()
        except Exception as e:
            raise PermissionDenied(f"Could not request notification permission: {e}") from e

        if status != PermissionStatus.GRANTED:
            self._permission_status = PermissionStatus.DENIED
            logger.info("Notification permission denied, keeping history only")
            raise PermissionDenied("Notification permission was not granted")

        await self.on_permission_granted()
        return status

    async def on_permission_granted(self) -> None:
        self._permission_status = PermissionStatus.GRANTED
        self._show_permission_prompt = False
        await self._set_flag(PERMISSION_GRANTED_KEY)

    def close_permission_prompt(self) -> None:
        self._show_permission_prompt = False

    async def skip_permission_prompt(self) -> None:
        """'Later': close the prompt and do not raise it again."""
        self._show_permission_prompt = False
        await self._set_flag(PERMISSION_SKIPPED_KEY)

    async def _set_flag(self, key: str) -> None:
        try:
            await self.store.set(key, "true")
        except StorageError as e:
            logger.error("Could not record %s: %s", key, e)

    def get_status(self) -> dict[str, Any]:
        """Get engine status."""
        return {
            "user_id": self._user_id,
            "requests": len(self._requests),
            "last_update": self._last_update.isoformat() if self._last_update else None,
            "known_states": len(self.state_table),
            "notifications": len(self.history),
            "unread": self.history.unread_count,
            "permission_status": self._permission_status.value if self._permission_status else None,
            "show_permission_prompt": self._show_permission_prompt,
            "polling": self.polling.get_status(),
        }
