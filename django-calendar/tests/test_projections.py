"""Integration tests for the projection read path.

These run against the database through DjangoCalendarStore.
Run with: pytest tests/test_projections.py -v
"""

import uuid
from datetime import date, datetime, time

import pytest

from calendars.domain import DailyRule, ProjectionKind, RecurrenceType, TimeWindow, WeeklyRule

JAN_1 = date(2024, 1, 1)
JAN_7 = date(2024, 1, 7)
JAN_14 = date(2024, 1, 14)

pytestmark = pytest.mark.django_db


@pytest.fixture
def second_week_schedule(event, services):
    """Daily schedule 2024-01-08 14:00 .. 2024-01-14 23:59:59."""
    return services.schedules.create_schedule(
        str(event.id),
        TimeWindow(datetime(2024, 1, 8, 14, 0), datetime(2024, 1, 14, 23, 59, 59)),
        DailyRule(),
        description="Second week",
    )


class TestEventProjections:
    """Tests for get_event_projections."""

    def test_first_week_daily(self, event, first_week_schedule, services):
        projections = services.projections.get_event_projections(str(event.id), JAN_1, JAN_7)
        assert len(projections) == 7
        assert {p.event_name for p in projections} == {"Daily Standup"}
        assert {p.recurrence_type for p in projections} == {RecurrenceType.DAILY}
        assert projections[0].status == "NORMAL: 09:00:00-23:59:59"

    def test_consecutive_schedules(
        self, event, first_week_schedule, second_week_schedule, services
    ):
        """Two back-to-back weeks give fourteen days with each week's own times."""
        projections = services.projections.get_event_projections(str(event.id), JAN_1, JAN_14)
        assert [p.projection_date for p in projections] == [
            date(2024, 1, d) for d in range(1, 15)
        ]
        assert projections[6].start_time == time(9)
        assert projections[7].start_time == time(14)

    def test_range_before_schedule_is_empty(self, event, second_week_schedule, services):
        assert services.projections.get_event_projections(str(event.id), JAN_1, JAN_7) == []

    def test_range_touching_last_day(self, event, second_week_schedule, services):
        projections = services.projections.get_event_projections(
            str(event.id), JAN_14, date(2024, 1, 20)
        )
        assert [p.projection_date for p in projections] == [JAN_14]

    def test_unknown_event_is_empty(self, first_week_schedule, services):
        assert (
            services.projections.get_event_projections(str(uuid.uuid4()), JAN_1, JAN_7) == []
        )

    def test_cancel_and_move_are_applied(self, event, first_week_schedule, services):
        schedule_id = str(first_week_schedule.id)
        services.exceptions.cancel_occurrence(schedule_id, date(2024, 1, 2))
        services.exceptions.move_occurrence(
            schedule_id, date(2024, 1, 3), date(2024, 1, 5), start=time(15), end=time(16)
        )

        projections = services.projections.get_event_projections(str(event.id), JAN_1, JAN_7)

        assert [p.projection_date.day for p in projections] == [1, 4, 5, 6, 7]
        moved = projections[2]
        assert moved.kind is ProjectionKind.MOVED
        assert moved.status == "MODIFIED: Date 2024-01-03 → 2024-01-05 Time 15:00:00-16:00:00"

    def test_move_inclusion_follows_owning_schedule_window(
        self, event, first_week_schedule, second_week_schedule, services
    ):
        """A move only shows when its own schedule's window meets the range."""
        services.exceptions.move_occurrence(
            str(second_week_schedule.id), date(2024, 1, 10), date(2024, 1, 6)
        )

        first_week = services.projections.get_event_projections(str(event.id), JAN_1, JAN_7)
        assert len(first_week) == 7
        assert {p.schedule_id for p in first_week} == {first_week_schedule.id}

        spanning = services.projections.get_event_projections(
            str(event.id), date(2024, 1, 6), date(2024, 1, 8)
        )
        on_sixth = [p for p in spanning if p.projection_date == date(2024, 1, 6)]
        assert [p.schedule_id for p in on_sixth] == [
            first_week_schedule.id,
            second_week_schedule.id,
        ]
        assert on_sixth[1].original_date == date(2024, 1, 10)


class TestCalendarQueries:
    """Tests for multi-event queries and summaries."""

    @pytest.fixture
    def review(self, services):
        event = services.events.create_event(name="Weekly Review", category="meeting")
        services.schedules.create_schedule(
            str(event.id),
            TimeWindow(datetime(2024, 1, 1, 10), datetime(2024, 1, 31, 11)),
            WeeklyRule(day_of_week=1),
        )
        return event

    def test_events_detailed_merges_events(self, first_week_schedule, review, services):
        projections = services.projections.get_events_detailed(JAN_1, JAN_7)
        assert len(projections) == 8
        assert [p.event_name for p in projections[:2]] == ["Daily Standup", "Weekly Review"]

    def test_upcoming_projections(self, first_week_schedule, review, services):
        projections = services.projections.get_upcoming_projections(start=JAN_1, days=6)
        assert len(projections) == 8

    def test_event_summary(self, event, first_week_schedule, services):
        services.exceptions.cancel_occurrence(str(first_week_schedule.id), date(2024, 1, 3))

        summary = services.projections.get_event_summary(str(event.id), today=date(2024, 1, 3))

        assert summary.event_name == "Daily Standup"
        assert (summary.total_schedules, summary.total_exceptions) == (1, 1)
        assert summary.next_occurrence.projection_date == date(2024, 1, 4)

    def test_event_summary_without_upcoming(self, event, first_week_schedule, services):
        summary = services.projections.get_event_summary(str(event.id), today=date(2025, 1, 1))
        assert summary.next_occurrence is None
