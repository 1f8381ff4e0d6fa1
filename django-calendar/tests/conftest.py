"""Pytest configuration and shared fixtures."""

import uuid
from datetime import date, datetime

import pytest

from calendars.domain import (
    DailyRule,
    EventId,
    ExceptionId,
    ExceptionType,
    Schedule,
    ScheduleException,
    ScheduleId,
    TimeWindow,
)
from calendars.services import CalendarServices, build_services
from calendars.stores.django_store import DjangoCalendarStore

CREATED = datetime(2023, 12, 1, 8, 0)


@pytest.fixture
def make_schedule():
    """Build an unsaved domain Schedule for engine tests."""

    def _make(start: datetime, end: datetime, rule=None, event_id: EventId | None = None) -> Schedule:
        return Schedule(
            id=ScheduleId(uuid.uuid4()),
            event_id=event_id or EventId(uuid.uuid4()),
            window=TimeWindow(start, end),
            rule=rule or DailyRule(),
            description="",
            created_at=CREATED,
            updated_at=CREATED,
        )

    return _make


@pytest.fixture
def make_exception():
    """Build an unsaved domain ScheduleException for engine tests."""

    def _make(
        schedule: Schedule,
        exception_date: date,
        exception_type: ExceptionType = ExceptionType.CANCELLED,
        **fields,
    ) -> ScheduleException:
        return ScheduleException(
            id=ExceptionId(uuid.uuid4()),
            schedule_id=schedule.id,
            exception_date=exception_date,
            exception_type=exception_type,
            created_at=CREATED,
            **fields,
        )

    return _make


@pytest.fixture
def store() -> DjangoCalendarStore:
    return DjangoCalendarStore()


@pytest.fixture
def services(store: DjangoCalendarStore) -> CalendarServices:
    return build_services(store)


@pytest.fixture
def event(db, services: CalendarServices):
    return services.events.create_event(
        name="Daily Standup", description="Team sync", category="meeting"
    )


@pytest.fixture
def first_week_schedule(event, services: CalendarServices) -> Schedule:
    """Daily schedule 2024-01-01 09:00 .. 2024-01-07 23:59:59."""
    return services.schedules.create_schedule(
        str(event.id),
        TimeWindow(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 7, 23, 59, 59)),
        DailyRule(),
        description="First week",
    )
