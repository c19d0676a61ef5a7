"""Durable key-value backends for engine state."""

from labnotify.storage.base import KeyValueStore
from labnotify.storage.dict_store import DictStore
from labnotify.storage.keys import (
    PERMISSION_ASKED_KEY,
    PERMISSION_GRANTED_KEY,
    PERMISSION_SKIPPED_KEY,
    notifications_key,
    states_key,
)
from labnotify.storage.sqlite_store import SQLiteStore

__all__ = [
    "KeyValueStore",
    "DictStore",
    "SQLiteStore",
    "PERMISSION_ASKED_KEY",
    "PERMISSION_GRANTED_KEY",
    "PERMISSION_SKIPPED_KEY",
    "notifications_key",
    "states_key",
]
