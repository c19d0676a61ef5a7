"""
Notification sink interface.

A sink is the platform capability that shows an immediate alert to the
user. It is optional: the engine takes ``sink=None`` when no capability
is available and treats every call site as a no-op in that case.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from labnotify.schema.notification import PermissionStatus

# Sent/failed messages a sink keeps for inspection
MAX_TRACKED_MESSAGES = 100


@dataclass
class SinkMessage:
    """A single alert handed to a sink."""

    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=datetime.now)

    def to_payload(self) -> dict[str, Any]:
        """Generic JSON payload (title/body/data)."""
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "data": self.data,
            "created_at": self.created_at.isoformat(),
        }


class NotificationSink(ABC):
    """
    Platform mechanism for delivering user-visible alerts.

    Implementations must not raise from send(); delivery failures are
    logged and reported through the return value.
    """

    @abstractmethod
    async def get_permission_status(self) -> PermissionStatus:
        """Current permission without prompting the user."""
        pass

    @abstractmethod
    async def request_permission(self) -> PermissionStatus:
        """Prompt the user (where the platform supports it) and return the outcome."""
        pass

    @abstractmethod
    async def send(self, title: str, body: str, data: dict[str, Any] | None = None) -> bool:
        """Deliver an alert immediately. Returns True on success."""
        pass
