"""Moving an event onto a new recurrence configuration."""

import logging
from typing import Any

from calendars.domain import EventId, RecurrenceRule, ScheduleId, TimeWindow
from calendars.services.overlap_guard import OverlapGuard
from calendars.stores.interfaces import CalendarStore

logger = logging.getLogger(__name__)


class ScheduleTransitionCoordinator:
    """Validates and creates an event's next schedule as one atomic step.

    Existing schedules are never modified or ended here: callers must make
    sure earlier windows stop before the new one starts, otherwise the
    transition fails with SchedulingConflictError and nothing is written.
    """

    def __init__(self, store: CalendarStore, guard: OverlapGuard | None = None) -> None:
        self._store = store
        self._guard = guard or OverlapGuard(store)

    def transition(
        self,
        event_id: str,
        window: TimeWindow,
        rule: RecurrenceRule,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> ScheduleId:
        """Create the event's new schedule and return its id.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            SchedulingConflictError: If the window overlaps an existing schedule.
        """
        eid = EventId.from_string(str(event_id))
        with self._guard.guarded_write(eid, window):
            schedule = self._store.insert_schedule(eid, window, rule, description, metadata or {})
        logger.info(
            "Transitioned event %s to schedule %s (%s every %d) over %s",
            eid,
            schedule.id,
            rule.type.value,
            rule.interval,
            window,
        )
        return schedule.id
