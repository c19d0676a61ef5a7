"""Polling schedule and visibility gating."""

from labnotify.polling.controller import (
    DEFAULT_INTERVAL_SECONDS,
    PollingController,
    PollingState,
)

__all__ = [
    "DEFAULT_INTERVAL_SECONDS",
    "PollingController",
    "PollingState",
]
