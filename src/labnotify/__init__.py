"""
Lab request notifier.

Watches a user's lab-usage reservation requests and turns status changes
(pending -> approved, ...) into notifications.

The system provides:
- Change detection against a persisted last-known-state table
- A notification history that survives restarts
- Visibility-gated periodic polling
- Optional push delivery through a notification sink

Quick Start:
    from labnotify import NotificationEngine, Settings

    engine = NotificationEngine.from_settings(Settings.from_env())
    await engine.initialize()
    await engine.start_session("42")
    await engine.set_visible(True)

    # Later
    print(engine.unread_count)
    await engine.close()
"""

__version__ = "0.1.0"

# High-level API
from labnotify.api.engine import NotificationEngine
from labnotify.config import Settings

# Detection
from labnotify.detection import ChangeDetector, NotificationMaterializer

# Errors
from labnotify.errors import (
    LabNotifyError,
    PermissionDenied,
    StorageError,
    TransportError,
)

# Polling
from labnotify.polling import PollingController, PollingState

# Schema
from labnotify.schema import (
    NotificationKind,
    NotificationRecord,
    PermissionStatus,
    Request,
    RequestStatus,
    TransitionEvent,
)

# Sinks and sources
from labnotify.sinks import NotificationSink
from labnotify.sources import HttpRequestSource, RemoteRequestSource

# Storage
from labnotify.storage import DictStore, KeyValueStore, SQLiteStore
from labnotify.tracking import NotificationHistory, StateTable

__all__ = [
    # Version
    "__version__",
    # API
    "NotificationEngine",
    "Settings",
    # Schema
    "Request",
    "RequestStatus",
    "NotificationKind",
    "NotificationRecord",
    "PermissionStatus",
    "TransitionEvent",
    # Errors
    "LabNotifyError",
    "TransportError",
    "StorageError",
    "PermissionDenied",
    # Engine parts
    "ChangeDetector",
    "NotificationMaterializer",
    "PollingController",
    "PollingState",
    "StateTable",
    "NotificationHistory",
    # Collaborators
    "NotificationSink",
    "RemoteRequestSource",
    "HttpRequestSource",
    "KeyValueStore",
    "DictStore",
    "SQLiteStore",
]
