"""Django ORM implementation of the CalendarStore."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Any

from django.db import IntegrityError, transaction

from calendars import models
from calendars.domain import (
    Event,
    EventId,
    ExceptionId,
    ExceptionType,
    RecurrenceRule,
    Schedule,
    ScheduleException,
    ScheduleId,
    ScheduleSnapshot,
    TimeWindow,
)
from calendars.domain.errors import DuplicateExceptionError, ScheduleNotFoundError
from calendars.domain.value_objects import rule_from_fields, rule_to_fields
from calendars.stores.interfaces import CalendarStore

logger = logging.getLogger(__name__)

EVENT_FIELDS = ("name", "description", "category", "priority", "status", "metadata")

# Domain attribute name -> column name for exception updates.
EXCEPTION_COLUMNS = {
    "exception_date": "exception_date",
    "exception_type": "exception_type",
    "modified_date": "modified_date",
    "modified_start": "modified_start_time",
    "modified_end": "modified_end_time",
    "notes": "notes",
    "metadata": "metadata",
}

SCHEDULE_COLUMNS = (
    "id",
    "event_id",
    "description",
    "start_date",
    "end_date",
    "recurrence_type",
    "recurrence_interval",
    "recurrence_day_of_week",
    "recurrence_day_of_month",
    "recurrence_month",
    "metadata",
    "created_at",
    "updated_at",
)

EXCEPTION_JOIN_COLUMNS = (
    "id",
    "exception_date",
    "exception_type",
    "modified_date",
    "modified_start_time",
    "modified_end_time",
    "notes",
    "metadata",
    "created_at",
)


def _event_to_domain(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        name=row.name,
        description=row.description,
        category=row.category,
        priority=row.priority,
        status=row.status,
        metadata=row.metadata or {},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _schedule_from_values(values: dict[str, Any]) -> Schedule:
    return Schedule(
        id=ScheduleId(values["id"]),
        event_id=EventId(values["event_id"]),
        window=TimeWindow(values["start_date"], values["end_date"]),
        rule=rule_from_fields(
            values["recurrence_type"],
            interval=values["recurrence_interval"],
            day_of_week=values["recurrence_day_of_week"],
            day_of_month=values["recurrence_day_of_month"],
            month=values["recurrence_month"],
        ),
        description=values["description"],
        metadata=values["metadata"] or {},
        created_at=values["created_at"],
        updated_at=values["updated_at"],
    )


def _schedule_to_domain(row: models.Schedule) -> Schedule:
    return _schedule_from_values({column: getattr(row, column) for column in SCHEDULE_COLUMNS})


def _exception_from_values(values: dict[str, Any], schedule_id: ScheduleId) -> ScheduleException:
    return ScheduleException(
        id=ExceptionId(values["id"]),
        schedule_id=schedule_id,
        exception_date=values["exception_date"],
        exception_type=ExceptionType(values["exception_type"]),
        modified_date=values["modified_date"],
        modified_start=values["modified_start_time"],
        modified_end=values["modified_end_time"],
        notes=values["notes"],
        metadata=values["metadata"] or {},
        created_at=values["created_at"],
    )


def _exception_to_domain(row: models.ScheduleException) -> ScheduleException:
    values = {column: getattr(row, column) for column in EXCEPTION_JOIN_COLUMNS}
    return _exception_from_values(values, ScheduleId(row.schedule_id))


class DjangoCalendarStore(CalendarStore):
    """PostgreSQL-backed calendar store using Django ORM."""

    def atomic(self):
        return transaction.atomic()

    @contextmanager
    def lock_event(self, event_id: EventId) -> Iterator[Event | None]:
        with transaction.atomic():
            row = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
            yield _event_to_domain(row) if row is not None else None

    # Events

    def list_events(self) -> list[Event]:
        return [_event_to_domain(row) for row in models.Event.objects.all()]

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _event_to_domain(row) if row is not None else None

    def event_exists(self, event_id: EventId) -> bool:
        return models.Event.objects.filter(pk=event_id.value).exists()

    def create_event(
        self,
        name: str,
        description: str = "",
        category: str = "",
        priority: int = 1,
        status: str = "active",
        metadata: dict[str, Any] | None = None,
    ) -> Event:
        row = models.Event.objects.create(
            name=name,
            description=description,
            category=category,
            priority=priority,
            status=status,
            metadata=metadata or {},
        )
        return _event_to_domain(row)

    def update_event(self, event_id: EventId, **changes: Any) -> Event | None:
        unknown = set(changes) - set(EVENT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown event fields: {', '.join(sorted(unknown))}")
        row = models.Event.objects.filter(pk=event_id.value).first()
        if row is None:
            return None
        for name, value in changes.items():
            setattr(row, name, value)
        row.save()
        return _event_to_domain(row)

    def delete_event(self, event_id: EventId) -> bool:
        deleted, _ = models.Event.objects.filter(pk=event_id.value).delete()
        return deleted > 0

    # Schedules

    def get_schedule(self, schedule_id: ScheduleId) -> Schedule | None:
        row = models.Schedule.objects.filter(pk=schedule_id.value).first()
        return _schedule_to_domain(row) if row is not None else None

    def list_schedules_for_event(self, event_id: EventId) -> list[Schedule]:
        rows = models.Schedule.objects.filter(event_id=event_id.value).order_by("start_date", "id")
        return [_schedule_to_domain(row) for row in rows]

    def insert_schedule(
        self,
        event_id: EventId,
        window: TimeWindow,
        rule: RecurrenceRule,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> Schedule:
        row = models.Schedule.objects.create(
            event_id=event_id.value,
            start_date=window.start,
            end_date=window.end,
            description=description,
            metadata=metadata or {},
            **rule_to_fields(rule),
        )
        return _schedule_to_domain(row)

    def update_schedule(
        self,
        schedule_id: ScheduleId,
        window: TimeWindow,
        rule: RecurrenceRule,
        description: str,
        metadata: dict[str, Any],
    ) -> Schedule:
        row = models.Schedule.objects.get(pk=schedule_id.value)
        row.start_date = window.start
        row.end_date = window.end
        row.description = description
        row.metadata = metadata
        for column, value in rule_to_fields(rule).items():
            setattr(row, column, value)
        row.save()
        return _schedule_to_domain(row)

    def delete_schedule(self, schedule_id: ScheduleId) -> bool:
        deleted, _ = models.Schedule.objects.filter(pk=schedule_id.value).delete()
        return deleted > 0

    # Exceptions

    def get_exception(self, exception_id: ExceptionId) -> ScheduleException | None:
        row = models.ScheduleException.objects.filter(pk=exception_id.value).first()
        return _exception_to_domain(row) if row is not None else None

    def list_exceptions_for_schedule(self, schedule_id: ScheduleId) -> list[ScheduleException]:
        rows = models.ScheduleException.objects.filter(schedule_id=schedule_id.value)
        return [_exception_to_domain(row) for row in rows.order_by("exception_date")]

    def insert_exception(
        self,
        schedule_id: ScheduleId,
        exception_date: date,
        exception_type: ExceptionType,
        modified_date: date | None = None,
        modified_start: time | None = None,
        modified_end: time | None = None,
        notes: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> ScheduleException:
        with transaction.atomic():
            # Foreign keys are checked at commit; lock the parent so a
            # concurrent delete waits for this insert.
            parent = models.Schedule.objects.select_for_update().filter(pk=schedule_id.value)
            if parent.first() is None:
                raise ScheduleNotFoundError(str(schedule_id))
            try:
                with transaction.atomic():
                    row = models.ScheduleException.objects.create(
                        schedule_id=schedule_id.value,
                        exception_date=exception_date,
                        exception_type=exception_type.value,
                        modified_date=modified_date,
                        modified_start_time=modified_start,
                        modified_end_time=modified_end,
                        notes=notes,
                        metadata=metadata or {},
                    )
            except IntegrityError as exc:
                self._raise_if_duplicate(schedule_id, exception_date, exc)
                raise
        return _exception_to_domain(row)

    def update_exception(self, exception_id: ExceptionId, **changes: Any) -> ScheduleException | None:
        unknown = set(changes) - set(EXCEPTION_COLUMNS)
        if unknown:
            raise TypeError(f"Unknown exception fields: {', '.join(sorted(unknown))}")
        row = models.ScheduleException.objects.filter(pk=exception_id.value).first()
        if row is None:
            return None
        for name, value in changes.items():
            if isinstance(value, ExceptionType):
                value = value.value
            setattr(row, EXCEPTION_COLUMNS[name], value)
        try:
            with transaction.atomic():
                row.save()
        except IntegrityError as exc:
            self._raise_if_duplicate(
                ScheduleId(row.schedule_id), row.exception_date, exc, exclude=exception_id
            )
            raise
        return _exception_to_domain(row)

    def delete_exception(self, exception_id: ExceptionId) -> bool:
        deleted, _ = models.ScheduleException.objects.filter(pk=exception_id.value).delete()
        return deleted > 0

    def _raise_if_duplicate(
        self,
        schedule_id: ScheduleId,
        exception_date: date,
        error: IntegrityError,
        exclude: ExceptionId | None = None,
    ) -> None:
        clash = models.ScheduleException.objects.filter(
            schedule_id=schedule_id.value, exception_date=exception_date
        )
        if exclude is not None:
            clash = clash.exclude(pk=exclude.value)
        if clash.exists():
            raise DuplicateExceptionError(str(schedule_id), exception_date) from error

    # Read path

    def load_snapshots(
        self,
        range_start: date,
        range_end: date,
        event_id: EventId | None = None,
    ) -> list[ScheduleSnapshot]:
        # One statement joining schedules, events and exceptions, so the
        # whole read comes from a single snapshot of the database. Moved
        # occurrences only show up through a schedule whose window intersects
        # the range.
        queryset = models.Schedule.objects.filter(
            start_date__lt=datetime.combine(range_end + timedelta(days=1), time.min),
            end_date__gte=datetime.combine(range_start, time.min),
        )
        if event_id is not None:
            queryset = queryset.filter(event_id=event_id.value)
        rows = queryset.order_by("start_date", "id", "exceptions__exception_date").values(
            *SCHEDULE_COLUMNS,
            "event__name",
            *(f"exceptions__{column}" for column in EXCEPTION_JOIN_COLUMNS),
        )

        schedules: dict[Any, Schedule] = {}
        names: dict[Any, str] = {}
        exceptions: dict[Any, list[ScheduleException]] = {}
        for values in rows:
            key = values["id"]
            if key not in schedules:
                schedules[key] = _schedule_from_values(values)
                names[key] = values["event__name"]
                exceptions[key] = []
            if values["exceptions__id"] is not None:
                joined = {
                    column: values[f"exceptions__{column}"] for column in EXCEPTION_JOIN_COLUMNS
                }
                exceptions[key].append(_exception_from_values(joined, schedules[key].id))

        logger.debug(
            "Loaded %d schedules for %s..%s (event=%s)",
            len(schedules),
            range_start,
            range_end,
            event_id,
        )
        return [
            ScheduleSnapshot(
                schedule=schedule,
                event_name=names[key],
                exceptions=tuple(exceptions[key]),
            )
            for key, schedule in schedules.items()
        ]

    def count_schedules_and_exceptions(self, event_id: EventId) -> tuple[int, int]:
        schedules = models.Schedule.objects.filter(event_id=event_id.value).count()
        exceptions = models.ScheduleException.objects.filter(
            schedule__event_id=event_id.value
        ).count()
        return schedules, exceptions
