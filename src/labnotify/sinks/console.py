"""
Console sink - prints alerts to the terminal with rich.
"""

from __future__ import annotations

from collections import deque
from typing import Any

from rich.console import Console
from rich.panel import Panel

from labnotify.schema.notification import NotificationKind, PermissionStatus
from labnotify.sinks.base import MAX_TRACKED_MESSAGES, NotificationSink, SinkMessage

_KIND_STYLES = {
    NotificationKind.SUCCESS.value: "green",
    NotificationKind.ERROR.value: "red",
    NotificationKind.WARNING.value: "yellow",
    NotificationKind.INFO.value: "blue",
}


class ConsoleSink(NotificationSink):
    """Always-permitted sink used by the CLI watcher."""

    def __init__(self, console: Console | None = None, max_tracked: int = MAX_TRACKED_MESSAGES):
        self.console = console or Console()
        self.sent: deque[SinkMessage] = deque(maxlen=max_tracked)

    async def get_permission_status(self) -> PermissionStatus:
        return PermissionStatus.GRANTED

    async def request_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED

    async def send(self, title: str, body: str, data: dict[str, Any] | None = None) -> bool:
        message = SinkMessage(title=title, body=body, data=data or {})
        style = _KIND_STYLES.get(message.data.get("kind", ""), "white")
        self.console.print(Panel(body, title=f"[bold]{title}[/bold]", border_style=style))
        self.sent.append(message)
        return True
