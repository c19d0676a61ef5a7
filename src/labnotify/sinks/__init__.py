"""
Notification sinks.

Supports:
- Console output for the CLI watcher
- HTTP webhooks to an external push gateway
- Absence of any sink (history-only notifications)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from labnotify.sinks.base import NotificationSink, SinkMessage
from labnotify.sinks.console import ConsoleSink
from labnotify.sinks.webhook import WebhookSink

if TYPE_CHECKING:
    from labnotify.config import Settings


def resolve_sink(settings: Settings, console: bool = False) -> NotificationSink | None:
    """
    Pick the sink available for this run.

    A configured webhook wins over the console; None means alerts are
    recorded in the history only.
    """
    if settings.webhook_url:
        return WebhookSink(settings.webhook_url, timeout=settings.request_timeout_seconds)
    if console:
        return ConsoleSink()
    return None


__all__ = [
    "NotificationSink",
    "SinkMessage",
    "ConsoleSink",
    "WebhookSink",
    "resolve_sink",
]
