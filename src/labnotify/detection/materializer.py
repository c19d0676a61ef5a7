"""
Turning transition events into notification records.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from labnotify.schema.notification import (
    NotificationKind,
    NotificationRecord,
    TransitionEvent,
)
from labnotify.schema.request import Request, RequestStatus
from labnotify.sinks.base import NotificationSink
from labnotify.tracking.history import NotificationHistory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationTemplate:
    """Fixed alert text for one status. ``message`` takes a ``{title}`` field."""

    title: str
    message: str
    kind: NotificationKind

    def render(self, request_title: str) -> str:
        return self.message.format(title=request_title)


# Must cover every RequestStatus member
STATUS_NOTIFICATIONS: dict[RequestStatus, NotificationTemplate] = {
    RequestStatus.APPROVED: NotificationTemplate(
        title="Request Approved!",
        message='Your request "{title}" has been approved!',
        kind=NotificationKind.SUCCESS,
    ),
    RequestStatus.REJECTED: NotificationTemplate(
        title="Request Rejected",
        message='Your request "{title}" has been rejected.',
        kind=NotificationKind.ERROR,
    ),
    RequestStatus.PENDING: NotificationTemplate(
        title="Request Under Review",
        message='Your request "{title}" is being reviewed.',
        kind=NotificationKind.WARNING,
    ),
}

_sequence = itertools.count()


def new_notification_id(now: datetime) -> str:
    """Millisecond timestamp plus a process-wide counter, unique per process."""
    return f"{int(now.timestamp() * 1000)}-{next(_sequence)}"


class NotificationMaterializer:
    """
    Builds NotificationRecords and applies their two side effects.

    For a recognized new status: dispatch to the sink when permission is
    granted, then prepend the record to the history (always).
    """

    def __init__(
        self,
        history: NotificationHistory,
        sink: NotificationSink | None = None,
        is_permitted: Callable[[], bool] = lambda: False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.history = history
        self.sink = sink
        self._is_permitted = is_permitted
        self._clock = clock

    async def materialize(
        self,
        event: TransitionEvent,
        request: Request,
    ) -> NotificationRecord | None:
        status = RequestStatus.parse(event.new_status)
        if status is None:
            logger.debug(
                "Status %r of request %s has no notification", event.new_status, event.request_id
            )
            return None

        template = STATUS_NOTIFICATIONS[status]
        created_at = self._clock()
        record = NotificationRecord(
            id=new_notification_id(created_at),
            request_id=event.request_id,
            title=request.title,
            message=template.render(request.title),
            kind=template.kind,
            created_at=created_at,
            previous_status=event.previous_status,
        )

        if self.sink is not None and self._is_permitted():
            await self._dispatch(template.title, record)
        else:
            logger.debug("Push not permitted, notification %s kept in history only", record.id)

        await self.history.prepend(record)
        return record

    async def _dispatch(self, title: str, record: NotificationRecord) -> None:
        started = time.monotonic()
        try:
            delivered = await self.sink.send(
                title,
                record.message,
                {"requestId": record.request_id, "kind": record.kind.value},
            )
        except Exception as e:
            logger.warning("Sink failed to deliver notification %s: %s", record.id, e)
            return
        if not delivered:
            logger.warning("Sink did not deliver notification %s", record.id)
        else:
            logger.debug(
                "Delivered notification %s in %.3fs", record.id, time.monotonic() - started
            )
