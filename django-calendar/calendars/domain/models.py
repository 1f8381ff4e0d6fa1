"""Domain models representing persisted and derived state.

These are pure domain objects with no persistence concerns.
Django ORM models are in calendars/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from calendars.domain.errors import InvalidEventError, InvalidExceptionError
from calendars.domain.value_objects import (
    EventId,
    ExceptionId,
    ExceptionType,
    RecurrenceRule,
    RecurrenceType,
    ScheduleId,
    TimeWindow,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    name: str
    description: str
    category: str
    priority: int
    status: str
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidEventError("Event name must not be empty")


@dataclass(frozen=True)
class Schedule:
    """Domain representation of a Schedule: one recurrence configuration of an event."""

    id: ScheduleId
    event_id: EventId
    window: TimeWindow
    rule: RecurrenceRule
    description: str
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def start_time(self) -> time:
        return self.window.start.time()

    @property
    def end_time(self) -> time:
        return self.window.end.time()


@dataclass(frozen=True)
class ScheduleException:
    """A per-date override of a schedule occurrence (cancel, retime or move)."""

    id: ExceptionId
    schedule_id: ScheduleId
    exception_date: date
    exception_type: ExceptionType
    created_at: datetime
    modified_date: date | None = None
    modified_start: time | None = None
    modified_end: time | None = None
    notes: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        validate_exception_fields(
            self.exception_type, self.modified_date, self.modified_start, self.modified_end
        )

    @property
    def is_move(self) -> bool:
        return (
            self.exception_type is ExceptionType.MODIFIED
            and self.modified_date is not None
            and self.modified_date != self.exception_date
        )

    @property
    def is_retime(self) -> bool:
        return self.exception_type is ExceptionType.MODIFIED and not self.is_move


def validate_exception_fields(
    exception_type: ExceptionType,
    modified_date: date | None,
    modified_start: time | None,
    modified_end: time | None,
) -> None:
    if exception_type is ExceptionType.CANCELLED and (
        modified_date is not None or modified_start is not None or modified_end is not None
    ):
        raise InvalidExceptionError("A cancellation cannot carry a modified date or time")


class ProjectionKind(Enum):
    NORMAL = "normal"
    RETIMED = "retimed"
    MOVED = "moved"


@dataclass(frozen=True)
class Projection:
    """A single concrete occurrence, derived on demand and never stored."""

    projection_date: date
    schedule_id: ScheduleId
    event_id: EventId
    event_name: str
    start_time: time
    end_time: time
    recurrence_type: RecurrenceType
    status: str
    kind: ProjectionKind = ProjectionKind.NORMAL
    notes: str | None = None
    original_date: date | None = None

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.projection_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        # An end earlier than the start means the occurrence runs past midnight.
        ends = datetime.combine(self.projection_date, self.end_time)
        if self.end_time < self.start_time:
            ends += timedelta(days=1)
        return ends

    def sort_key(self) -> tuple:
        return (
            self.projection_date,
            self.start_time,
            self.schedule_id.value,
            self.original_date or self.projection_date,
        )


@dataclass(frozen=True)
class ScheduleSnapshot:
    """A schedule together with everything the read path needs to project it."""

    schedule: Schedule
    event_name: str
    exceptions: tuple[ScheduleException, ...] = ()


@dataclass(frozen=True)
class EventSummary:
    event_id: EventId
    event_name: str
    total_schedules: int
    total_exceptions: int
    next_occurrence: Projection | None = None
