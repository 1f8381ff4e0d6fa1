"""Schedule service - every schedule write passes through the OverlapGuard."""

import logging
from datetime import datetime
from typing import Any

from calendars.domain import EventId, RecurrenceRule, Schedule, ScheduleId, TimeWindow
from calendars.domain.errors import EventNotFoundError, ScheduleNotFoundError
from calendars.services.overlap_guard import OverlapGuard
from calendars.stores.interfaces import CalendarStore

logger = logging.getLogger(__name__)


class ScheduleService:
    """Create, update and inspect the recurrence configurations of events."""

    def __init__(self, store: CalendarStore, guard: OverlapGuard | None = None) -> None:
        self._store = store
        self._guard = guard or OverlapGuard(store)

    def get_schedule(self, schedule_id: str) -> Schedule:
        sid = ScheduleId.from_string(str(schedule_id))
        schedule = self._store.get_schedule(sid)
        if schedule is None:
            raise ScheduleNotFoundError(str(sid))
        return schedule

    def list_schedules(self, event_id: str) -> list[Schedule]:
        """Return an event's schedules ordered by window start.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        eid = EventId.from_string(str(event_id))
        if not self._store.event_exists(eid):
            raise EventNotFoundError(str(eid))
        return self._store.list_schedules_for_event(eid)

    def check_schedule_overlap(
        self,
        event_id: str,
        start: datetime,
        end: datetime,
        exclude_schedule_id: str | None = None,
    ) -> bool:
        """Return True if [start, end] overlaps another schedule of the event."""
        eid = EventId.from_string(str(event_id))
        exclude = (
            ScheduleId.from_string(str(exclude_schedule_id))
            if exclude_schedule_id is not None
            else None
        )
        return self._guard.check(eid, TimeWindow(start, end), exclude)

    def create_schedule(
        self,
        event_id: str,
        window: TimeWindow,
        rule: RecurrenceRule,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> Schedule:
        """Add a schedule to an event.

        Raises:
            EventNotFoundError: If the event does not exist.
            SchedulingConflictError: If the window overlaps a sibling schedule.
        """
        eid = EventId.from_string(str(event_id))
        with self._guard.guarded_write(eid, window):
            schedule = self._store.insert_schedule(eid, window, rule, description, metadata or {})
        logger.info("Created schedule %s for event %s over %s", schedule.id, eid, window)
        return schedule

    def update_schedule(
        self,
        schedule_id: str,
        window: TimeWindow | None = None,
        rule: RecurrenceRule | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Schedule:
        """Change a schedule; fields left as None keep their current value.

        The overlap check ignores the schedule being updated.

        Raises:
            ScheduleNotFoundError: If the schedule does not exist.
            SchedulingConflictError: If the new window overlaps a sibling schedule.
        """
        sid = ScheduleId.from_string(str(schedule_id))
        current = self._store.get_schedule(sid)
        if current is None:
            raise ScheduleNotFoundError(str(sid))

        new_window = window or current.window
        with self._guard.guarded_write(current.event_id, new_window, exclude_schedule_id=sid):
            # Unchanged fields come from the row as it is under the lock.
            current = self._store.get_schedule(sid)
            if current is None:
                raise ScheduleNotFoundError(str(sid))
            schedule = self._store.update_schedule(
                sid,
                window=window or current.window,
                rule=rule or current.rule,
                description=description if description is not None else current.description,
                metadata=metadata if metadata is not None else current.metadata,
            )
        logger.info("Updated schedule %s of event %s", sid, current.event_id)
        return schedule

    def delete_schedule(self, schedule_id: str) -> None:
        """Delete a schedule together with its exceptions."""
        sid = ScheduleId.from_string(str(schedule_id))
        if not self._store.delete_schedule(sid):
            raise ScheduleNotFoundError(str(sid))
        logger.info("Deleted schedule %s", sid)
