"""Public engine API."""

from labnotify.api.engine import NotificationEngine

__all__ = ["NotificationEngine"]
