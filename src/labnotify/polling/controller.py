"""
Polling lifecycle for the notification engine.

Owns the recurring timer and decides when a fetch-detect-persist cycle
may run, based on the visibility flag and the authenticated session.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0


class PollingState(Enum):
    """State of the polling schedule."""

    STOPPED = "stopped"
    RUNNING = "running"


class PollingController:
    """
    Runs a cycle immediately on start and then every ``interval_seconds``.

    Features:
    - Visibility gating (ticks are skipped while not visible)
    - Cycles run as separate tasks so a slow fetch never delays a tick
    - Optional single-flight: a tick is skipped while a cycle is in flight
    - stop() cancels only the schedule, in-flight cycles still commit
    """

    def __init__(
        self,
        cycle: Callable[[], Awaitable[Any]],
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        is_authenticated: Callable[[], bool] = lambda: True,
        single_flight: bool = True,
    ):
        self._cycle = cycle
        self.interval_seconds = interval_seconds
        self._is_authenticated = is_authenticated
        self.single_flight = single_flight

        self.state = PollingState.STOPPED
        self.user_visible = False

        self._timer_task: asyncio.Task | None = None
        self._cycle_tasks: set[asyncio.Task] = set()
        self._in_flight = 0

        # Counters
        self.cycles_started = 0
        self.ticks_skipped = 0
        self.last_cycle_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self.state == PollingState.RUNNING

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def start(self) -> bool:
        """
        Begin polling. Returns False (and does nothing) when already
        running or when the view is not visible.
        """
        if self.is_running:
            logger.debug("Polling already running")
            return False
        if not self.user_visible:
            logger.debug("Not visible, polling not started")
            return False

        logger.info("Polling started (every %ss)", self.interval_seconds)
        self.state = PollingState.RUNNING
        self._spawn_cycle()
        self._timer_task = asyncio.create_task(self._timer_loop())
        return True

    async def stop(self) -> None:
        """Cancel the schedule. Safe to call when already stopped."""
        was_running = self.is_running
        self.state = PollingState.STOPPED
        # Detach before awaiting: a start() may install a new timer meanwhile
        timer, self._timer_task = self._timer_task, None
        if timer:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        if was_running:
            logger.info("Polling stopped")

    async def set_visible(self, visible: bool) -> None:
        """Record visibility and start or stop the schedule to match it."""
        self.user_visible = visible
        if visible and self._is_authenticated() and not self.is_running:
            await self.start()
        elif not visible and self.is_running:
            await self.stop()

    async def run_cycle(self) -> Any:
        """
        Run one cycle now, ignoring visibility and single-flight.

        Exceptions are logged and swallowed; returns the cycle's result
        or None on failure.
        """
        self._in_flight += 1
        self.cycles_started += 1
        try:
            return await self._cycle()
        except Exception:
            logger.exception("Polling cycle failed")
            return None
        finally:
            self._in_flight -= 1
            self.last_cycle_at = datetime.now()

    async def wait_idle(self) -> None:
        """Wait until every spawned cycle has finished."""
        while self._cycle_tasks:
            await asyncio.gather(*list(self._cycle_tasks), return_exceptions=True)

    async def _timer_loop(self) -> None:
        """Recurring tick; only stop() ends it."""
        while True:
            await asyncio.sleep(self.interval_seconds)
            self._tick()

    def _tick(self) -> None:
        if not self.user_visible:
            logger.debug("Not visible, skipping tick")
            self.ticks_skipped += 1
            return
        if self.single_flight and (self._in_flight or self._cycle_tasks):
            logger.debug("Cycle still in flight, skipping tick")
            self.ticks_skipped += 1
            return
        self._spawn_cycle()

    def _spawn_cycle(self) -> None:
        task = asyncio.create_task(self.run_cycle())
        self._cycle_tasks.add(task)
        task.add_done_callback(self._cycle_tasks.discard)

    def get_status(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "user_visible": self.user_visible,
            "interval_seconds": self.interval_seconds,
            "single_flight": self.single_flight,
            "in_flight": self._in_flight,
            "cycles_started": self.cycles_started,
            "ticks_skipped": self.ticks_skipped,
            "last_cycle_at": self.last_cycle_at.isoformat() if self.last_cycle_at else None,
        }
