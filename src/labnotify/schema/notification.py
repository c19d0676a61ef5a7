"""
Notification schema - transition events and the records they produce.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from labnotify.schema.request import RequestId


class NotificationKind(str, Enum):
    """Visual severity of a notification."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class PermissionStatus(str, Enum):
    """Platform permission to show user-visible alerts."""

    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class TransitionEvent(BaseModel):
    """A detected status change between two consecutive snapshots."""

    request_id: RequestId
    previous_status: str
    new_status: str

    model_config = {"frozen": True}


class NotificationRecord(BaseModel):
    """
    One entry of the notification history.

    Records are immutable apart from the read flag, which is changed by
    producing a copy (see NotificationHistory.mark_read).
    """

    id: str
    request_id: RequestId
    title: str = ""
    message: str = ""
    kind: NotificationKind = NotificationKind.INFO
    created_at: datetime = Field(default_factory=datetime.now)
    read: bool = False
    previous_status: str = ""

    model_config = {"frozen": True}
