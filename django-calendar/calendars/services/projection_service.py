"""Projection query service - the read path.

Reads one consistent snapshot of schedules and exceptions from the store,
projects each schedule independently and merges the results in
(date, start time) order.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from calendars.domain import EventId, EventSummary, Projection, ScheduleSnapshot
from calendars.domain.errors import EventNotFoundError, InvalidDateRangeError
from calendars.engine import ExceptionResolver
from calendars.stores.interfaces import CalendarStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_RANGE_DAYS = 3660
DEFAULT_UPCOMING_DAYS = 365


class ProjectionQueryService:
    """Service for computing occurrences of events over a date range."""

    def __init__(
        self,
        store: CalendarStore,
        max_range_days: int | None = DEFAULT_MAX_RANGE_DAYS,
        upcoming_days: int = DEFAULT_UPCOMING_DAYS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._max_range_days = max_range_days
        self._upcoming_days = upcoming_days
        self._today = today

    def get_event_projections(
        self, event_id: str, range_start: date, range_end: date
    ) -> list[Projection]:
        """Return an event's occurrences in [range_start, range_end].

        Unknown events and ranges that miss every schedule give an empty list.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            InvalidDateRangeError: If the range exceeds the configured maximum.
        """
        eid = EventId.from_string(str(event_id))
        if not self._check_range(range_start, range_end):
            return []
        snapshots = self._store.load_snapshots(range_start, range_end, event_id=eid)
        return self._project(snapshots, range_start, range_end)

    def get_events_detailed(self, range_start: date, range_end: date) -> list[Projection]:
        """Return every event's occurrences in [range_start, range_end]."""
        if not self._check_range(range_start, range_end):
            return []
        snapshots = self._store.load_snapshots(range_start, range_end)
        return self._project(snapshots, range_start, range_end)

    def get_upcoming_projections(
        self, start: date | None = None, days: int | None = None
    ) -> list[Projection]:
        """Calendar of all events from start (default today) over the upcoming horizon."""
        first = start or self._today()
        horizon = days if days is not None else self._upcoming_days
        return self.get_events_detailed(first, first + timedelta(days=horizon))

    def get_event_summary(self, event_id: str, today: date | None = None) -> EventSummary:
        """Counts of an event's schedules and exceptions, and its next occurrence.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        eid = EventId.from_string(str(event_id))
        event = self._store.get_event(eid)
        if event is None:
            raise EventNotFoundError(str(eid))

        first = today or self._today()
        upcoming = self.get_event_projections(
            str(eid), first, first + timedelta(days=self._upcoming_days)
        )
        total_schedules, total_exceptions = self._store.count_schedules_and_exceptions(eid)
        return EventSummary(
            event_id=eid,
            event_name=event.name,
            total_schedules=total_schedules,
            total_exceptions=total_exceptions,
            next_occurrence=upcoming[0] if upcoming else None,
        )

    def _check_range(self, range_start: date, range_end: date) -> bool:
        if range_end < range_start:
            return False
        if self._max_range_days is not None:
            span = (range_end - range_start).days + 1
            if span > self._max_range_days:
                raise InvalidDateRangeError(
                    f"Date range of {span} days exceeds the maximum of {self._max_range_days}"
                )
        return True

    def _project(
        self,
        snapshots: Iterable[ScheduleSnapshot],
        range_start: date,
        range_end: date,
    ) -> list[Projection]:
        projections: list[Projection] = []
        count = 0
        for snapshot in snapshots:
            # Schedules are resolved independently; a move never merges with
            # another schedule's occurrence on the same date.
            projections.extend(
                ExceptionResolver.from_snapshot(snapshot).project(range_start, range_end)
            )
            count += 1
        projections.sort(key=Projection.sort_key)
        logger.debug(
            "Projected %d occurrences from %d schedules for %s..%s",
            len(projections),
            count,
            range_start,
            range_end,
        )
        return projections
