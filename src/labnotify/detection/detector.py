"""
Change detection between consecutive request snapshots.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from labnotify.schema.notification import TransitionEvent
from labnotify.schema.request import Request, statuses_equal
from labnotify.tracking.state_table import StateTable

logger = logging.getLogger(__name__)


class ChangeDetector:
    """
    Diffs a fresh snapshot against the StateTable.

    The table is the authoritative baseline; the previous in-memory
    snapshot only fills in ids the table has not seen yet. Every id in the
    fresh snapshot is written back to the table whether or not it changed,
    so re-running with the same snapshot never reports the same
    transition twice.
    """

    async def detect(
        self,
        previous: Sequence[Request],
        new: Sequence[Request],
        state_table: StateTable,
    ) -> list[TransitionEvent]:
        if not previous:
            # Cold start: nothing to diff against, only record the baseline
            logger.debug("No previous snapshot, seeding %d states", len(new))
            state_table.update((request.id, request.status) for request in new)
            if new:
                await state_table.persist()
            return []

        previous_status = {request.id: request.status for request in previous}
        events: list[TransitionEvent] = []

        for request in new:
            baseline = state_table.get(request.id)
            if baseline is None:
                baseline = previous_status.get(request.id)

            if baseline is None:
                logger.debug("Request %s is new (%s)", request.id, request.status)
            elif not statuses_equal(baseline, request.status):
                logger.info(
                    "Request %s changed: %r -> %r", request.id, baseline, request.status
                )
                events.append(
                    TransitionEvent(
                        request_id=request.id,
                        previous_status=baseline,
                        new_status=request.status,
                    )
                )

            state_table.set(request.id, request.status)

        if new:
            await state_table.persist()
        return events
