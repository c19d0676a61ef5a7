"""Data model for requests, transitions and notifications."""

from labnotify.schema.notification import (
    NotificationKind,
    NotificationRecord,
    PermissionStatus,
    TransitionEvent,
)
from labnotify.schema.request import (
    Request,
    RequestId,
    RequestStatus,
    normalize_status,
    statuses_equal,
)

__all__ = [
    "Request",
    "RequestId",
    "RequestStatus",
    "normalize_status",
    "statuses_equal",
    "NotificationKind",
    "NotificationRecord",
    "PermissionStatus",
    "TransitionEvent",
]
