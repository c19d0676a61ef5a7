"""
Error taxonomy for the notification engine.

Failures inside a polling cycle are recovered at the cycle boundary;
only explicit user-facing calls let these escape to the caller.
"""

from __future__ import annotations


class LabNotifyError(Exception):
    """Base class for all engine errors."""


class TransportError(LabNotifyError):
    """Fetching requests from the remote API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(LabNotifyError):
    """Reading or writing the key-value store failed."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class PermissionDenied(LabNotifyError):
    """The user declined (or the platform cannot grant) notification permission."""
