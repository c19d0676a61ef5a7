"""Remote sources of request snapshots."""

from labnotify.sources.base import RemoteRequestSource
from labnotify.sources.http import HttpRequestSource

__all__ = [
    "RemoteRequestSource",
    "HttpRequestSource",
]
