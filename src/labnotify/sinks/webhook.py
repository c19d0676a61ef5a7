"""
Webhook sink - forwards alerts to an HTTP push gateway.

The gateway (ntfy, a Firebase relay, a chat webhook...) owns the actual
device delivery; this sink only POSTs the JSON payload.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any

import httpx

from labnotify.schema.notification import PermissionStatus
from labnotify.sinks.base import MAX_TRACKED_MESSAGES, NotificationSink, SinkMessage

logger = logging.getLogger(__name__)


class WebhookSink(NotificationSink):
    """
    Sink that POSTs each alert to a configured URL.

    Permission is implied by configuration: a sink with a URL is granted.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        max_tracked: int = MAX_TRACKED_MESSAGES,
    ):
        self.url = url
        self.headers = headers or {}
        self.timeout = timeout
        self._client = client

        # Most recent messages only; totals are kept in the counters
        self.sent: deque[SinkMessage] = deque(maxlen=max_tracked)
        self.failed: deque[tuple[SinkMessage, str]] = deque(maxlen=max_tracked)
        self.sent_count = 0
        self.failed_count = 0

    async def get_permission_status(self) -> PermissionStatus:
        return PermissionStatus.GRANTED if self.url else PermissionStatus.DENIED

    async def request_permission(self) -> PermissionStatus:
        return await self.get_permission_status()

    async def send(self, title: str, body: str, data: dict[str, Any] | None = None) -> bool:
        message = SinkMessage(title=title, body=body, data=data or {})
        try:
            if self._client is not None:
                response = await self._post(self._client, message)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, message)
        except httpx.HTTPError as e:
            logger.warning("Webhook delivery failed: %s", e)
            self.failed.append((message, str(e)))
            self.failed_count += 1
            return False

        if response.is_success:
            self.sent.append(message)
            self.sent_count += 1
            return True

        logger.warning("Webhook rejected alert with HTTP %s", response.status_code)
        self.failed.append((message, f"HTTP {response.status_code}"))
        self.failed_count += 1
        return False

    async def _post(self, client: httpx.AsyncClient, message: SinkMessage) -> httpx.Response:
        return await client.post(
            self.url,
            headers={"Content-Type": "application/json", **self.headers},
            json=message.to_payload(),
            timeout=self.timeout,
        )

    def get_stats(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "sent": self.sent_count,
            "failed": self.failed_count,
        }
