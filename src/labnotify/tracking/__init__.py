"""Persisted engine state: last-known statuses and notification history."""

from labnotify.tracking.history import NotificationHistory
from labnotify.tracking.state_table import StateTable

__all__ = [
    "NotificationHistory",
    "StateTable",
]
