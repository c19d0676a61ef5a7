"""
Pytest configuration and shared fixtures for labnotify tests.
"""

import asyncio
import tempfile
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import pytest

from labnotify.errors import StorageError, TransportError
from labnotify.schema import PermissionStatus, Request
from labnotify.sinks import NotificationSink
from labnotify.sources import RemoteRequestSource
from labnotify.storage import DictStore


class FakeSource(RemoteRequestSource):
    """Scriptable request source."""

    def __init__(self, records: list[dict[str, Any]] | None = None):
        self.records = list(records or [])
        self.fail = False
        self.gate: asyncio.Event | None = None
        self.calls = 0
        self.owners: list[str] = []

    def set_records(self, *records: dict[str, Any]) -> None:
        self.records = list(records)

    async def fetch_requests(self, owner_id: str) -> list[Request]:
        self.calls += 1
        self.owners.append(owner_id)
        # Snapshot taken when the fetch starts, like a real request
        records = list(self.records)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise TransportError("connection refused")
        return [Request.model_validate(record) for record in records]


class RecordingSink(NotificationSink):
    """Sink that keeps every alert in memory."""

    def __init__(
        self,
        status: PermissionStatus = PermissionStatus.GRANTED,
        grant_on_request: bool = True,
    ):
        self.status = status
        self.grant_on_request = grant_on_request
        self.permission_requests = 0
        self.sent: list[tuple[str, str, dict[str, Any]]] = []

    async def get_permission_status(self) -> PermissionStatus:
        return self.status

    async def request_permission(self) -> PermissionStatus:
        self.permission_requests += 1
        self.status = PermissionStatus.GRANTED if self.grant_on_request else PermissionStatus.DENIED
        return self.status

    async def send(self, title: str, body: str, data: dict[str, Any] | None = None) -> bool:
        self.sent.append((title, body, data or {}))
        return True


class FailingStore(DictStore):
    """Store whose reads and/or writes always fail."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError("disk unavailable", key=key)
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("disk unavailable", key=key)
        await super().set(key, value)

    async def remove(self, key: str) -> bool:
        if self.fail_writes:
            raise StorageError("disk unavailable", key=key)
        return await super().remove(key)


def make_request(request_id: Any, status: str, title: str = "Chemistry lab") -> Request:
    return Request(id=request_id, title=title, status=status)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dict_store() -> DictStore:
    return DictStore()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource([{"id_solicitud": 1, "practica_titulo": "Chemistry lab", "estado": "pendiente"}])


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
async def sqlite_store(temp_dir: Path) -> AsyncGenerator:
    """Create an initialized SQLiteStore."""
    from labnotify.storage import SQLiteStore

    store = SQLiteStore(temp_dir / "state.sqlite")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
async def engine(source, dict_store, sink) -> AsyncGenerator:
    """Engine with an active session for user "42"."""
    from labnotify import NotificationEngine

    engine = NotificationEngine(
        source=source,
        store=dict_store,
        sink=sink,
        interval_seconds=0.01,
    )
    await engine.initialize()
    await engine.start_session("42")
    yield engine
    await engine.close()
