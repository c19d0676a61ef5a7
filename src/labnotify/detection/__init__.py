"""Change detection and notification materialization."""

from labnotify.detection.detector import ChangeDetector
from labnotify.detection.materializer import (
    STATUS_NOTIFICATIONS,
    NotificationMaterializer,
    NotificationTemplate,
)

__all__ = [
    "ChangeDetector",
    "NotificationMaterializer",
    "NotificationTemplate",
    "STATUS_NOTIFICATIONS",
]
