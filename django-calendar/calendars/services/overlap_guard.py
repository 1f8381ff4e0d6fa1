"""Enforcement of the no-overlap invariant between one event's schedules."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from calendars.domain import Event, EventId, Schedule, ScheduleId, TimeWindow
from calendars.domain.errors import EventNotFoundError, SchedulingConflictError
from calendars.stores.interfaces import CalendarStore

logger = logging.getLogger(__name__)


class OverlapGuard:
    """Checks candidate windows against an event's other schedules.

    Every schedule write goes through `guarded_write`, which holds the
    event's lock across the check and the write so two writers for the
    same event cannot both pass the check before either commits.
    """

    def __init__(self, store: CalendarStore) -> None:
        self._store = store

    def find_conflict(
        self,
        event_id: EventId,
        window: TimeWindow,
        exclude_schedule_id: ScheduleId | None = None,
    ) -> Schedule | None:
        """Return the first sibling schedule overlapping window, if any."""
        for schedule in self._store.list_schedules_for_event(event_id):
            if schedule.id == exclude_schedule_id:
                continue
            if schedule.window.overlaps(window):
                return schedule
        return None

    def check(
        self,
        event_id: EventId,
        window: TimeWindow,
        exclude_schedule_id: ScheduleId | None = None,
    ) -> bool:
        """Return True if any other schedule of the event overlaps window."""
        return self.find_conflict(event_id, window, exclude_schedule_id) is not None

    def ensure_no_overlap(
        self,
        event_id: EventId,
        window: TimeWindow,
        exclude_schedule_id: ScheduleId | None = None,
    ) -> None:
        """Raise SchedulingConflictError if window overlaps a sibling schedule."""
        conflict = self.find_conflict(event_id, window, exclude_schedule_id)
        if conflict is not None:
            logger.warning(
                "Rejected schedule window %s for event %s: overlaps schedule %s",
                window,
                event_id,
                conflict.id,
            )
            raise SchedulingConflictError(
                event_id=str(event_id),
                window=str(window),
                conflicting_schedule_id=str(conflict.id),
                conflicting_window=str(conflict.window),
            )

    @contextmanager
    def guarded_write(
        self,
        event_id: EventId,
        window: TimeWindow,
        exclude_schedule_id: ScheduleId | None = None,
    ) -> Iterator[Event]:
        """Lock the event, verify the window, and yield for the write.

        The caller's write runs inside the same transaction; any error raised
        in the block, including a conflict, rolls everything back.

        Raises:
            EventNotFoundError: If the event does not exist.
            SchedulingConflictError: If the window overlaps a sibling schedule.
        """
        with self._store.lock_event(event_id) as event:
            if event is None:
                raise EventNotFoundError(str(event_id))
            self.ensure_no_overlap(event_id, window, exclude_schedule_id)
            yield event
