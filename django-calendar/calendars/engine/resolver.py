"""Overlay of stored exceptions onto a schedule's candidate occurrences.

Resolution rules, per candidate date `d` of one schedule:

- no exception: a NORMAL projection with the schedule's base times;
- cancelled: nothing on `d`;
- modified without a new date (retime): a projection on `d` with the
  modified times, falling back to the base times;
- modified with a new date (move): nothing on `d`, and a projection on the
  new date when that date lies inside the query range.

A move into a date takes that date's slot for the schedule: whatever the
schedule would otherwise have emitted there (normal, retimed or cancelled)
is replaced by the moved occurrence.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, time

from calendars.domain.models import (
    Projection,
    ProjectionKind,
    Schedule,
    ScheduleException,
    ScheduleSnapshot,
)
from calendars.domain.value_objects import ExceptionType
from calendars.engine.expander import Occurrence, expand, occurs_on

logger = logging.getLogger(__name__)


def format_time(value: time) -> str:
    return value.strftime("%H:%M:%S")


def normal_status(start: time, end: time) -> str:
    return f"NORMAL: {format_time(start)}-{format_time(end)}"


def retime_status(start: time, end: time) -> str:
    return f"MODIFIED: Time {format_time(start)}-{format_time(end)}"


def move_status(source: date, target: date, start: time, end: time) -> str:
    return (
        f"MODIFIED: Date {source.isoformat()} → {target.isoformat()} "
        f"Time {format_time(start)}-{format_time(end)}"
    )


def _times(exception: ScheduleException, base_start: time, base_end: time) -> tuple[time, time]:
    start = exception.modified_start if exception.modified_start is not None else base_start
    end = exception.modified_end if exception.modified_end is not None else base_end
    return start, end


class ExceptionResolver:
    """Resolves one schedule's candidates against that schedule's exceptions."""

    def __init__(
        self,
        schedule: Schedule,
        event_name: str,
        exceptions: Iterable[ScheduleException] = (),
    ) -> None:
        self._schedule = schedule
        self._event_name = event_name
        self._by_date: dict[date, ScheduleException] = {}
        for exception in exceptions:
            if exception.schedule_id != schedule.id:
                raise ValueError(
                    f"Exception {exception.id} belongs to schedule {exception.schedule_id}, "
                    f"not {schedule.id}"
                )
            self._by_date[exception.exception_date] = exception

        # Moves only count when they relocate a real occurrence.
        self._moves: list[ScheduleException] = []
        for exception_date in sorted(self._by_date):
            exception = self._by_date[exception_date]
            if not exception.is_move:
                continue
            if occurs_on(schedule, exception_date):
                self._moves.append(exception)
            else:
                logger.debug(
                    "Ignoring move %s of schedule %s: %s is not an occurrence",
                    exception.id,
                    schedule.id,
                    exception_date,
                )
        self._move_targets = {exc.modified_date for exc in self._moves}

    @classmethod
    def from_snapshot(cls, snapshot: ScheduleSnapshot) -> "ExceptionResolver":
        return cls(snapshot.schedule, snapshot.event_name, snapshot.exceptions)

    def resolve(
        self,
        candidates: Iterable[Occurrence],
        range_start: date,
        range_end: date,
    ) -> list[Projection]:
        """Return the final projections for the range, ordered and stable."""
        projections = list(self._overlay(candidates))
        projections.extend(self._moved(range_start, range_end))
        return sorted(projections, key=Projection.sort_key)

    def project(self, range_start: date, range_end: date) -> list[Projection]:
        """Expand the schedule over the range and resolve the result."""
        return self.resolve(expand(self._schedule, range_start, range_end), range_start, range_end)

    def _overlay(self, candidates: Iterable[Occurrence]) -> Iterator[Projection]:
        for occurrence in candidates:
            if occurrence.day in self._move_targets:
                continue
            exception = self._by_date.get(occurrence.day)
            if exception is None:
                yield self._projection(
                    occurrence.day,
                    occurrence.start_time,
                    occurrence.end_time,
                    normal_status(occurrence.start_time, occurrence.end_time),
                )
            elif exception.exception_type is ExceptionType.CANCELLED or exception.is_move:
                continue
            else:
                start, end = _times(exception, occurrence.start_time, occurrence.end_time)
                yield self._projection(
                    occurrence.day,
                    start,
                    end,
                    retime_status(start, end),
                    kind=ProjectionKind.RETIMED,
                    notes=exception.notes or None,
                )

    def _moved(self, range_start: date, range_end: date) -> Iterator[Projection]:
        for exception in self._moves:
            target = exception.modified_date
            if not range_start <= target <= range_end:
                continue
            start, end = _times(exception, self._schedule.start_time, self._schedule.end_time)
            yield self._projection(
                target,
                start,
                end,
                move_status(exception.exception_date, target, start, end),
                kind=ProjectionKind.MOVED,
                notes=exception.notes or None,
                original_date=exception.exception_date,
            )

    def _projection(
        self,
        day: date,
        start: time,
        end: time,
        status: str,
        kind: ProjectionKind = ProjectionKind.NORMAL,
        notes: str | None = None,
        original_date: date | None = None,
    ) -> Projection:
        return Projection(
            projection_date=day,
            schedule_id=self._schedule.id,
            event_id=self._schedule.event_id,
            event_name=self._event_name,
            start_time=start,
            end_time=end,
            recurrence_type=self._schedule.rule.type,
            status=status,
            kind=kind,
            notes=notes,
            original_date=original_date,
        )
