"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import date, datetime, time

import pytest

from calendars.domain import (
    DailyRule,
    EventId,
    ExceptionType,
    MonthlyRule,
    RecurrenceType,
    TimeWindow,
    WeeklyRule,
    YearlyRule,
)
from calendars.domain.errors import (
    DomainError,
    ErrorCode,
    InvalidEventIdError,
    InvalidExceptionError,
    InvalidRecurrenceRuleError,
    InvalidTimeWindowError,
    ValidationError,
)
from calendars.domain.value_objects import rule_from_fields, rule_to_fields


class TestRecurrenceRule:
    """Tests for the recurrence rule variants."""

    @pytest.mark.parametrize("interval", [0, -1, 1.5, True])
    def test_rejects_non_positive_interval(self, interval):
        """Interval must be a positive integer."""
        with pytest.raises(InvalidRecurrenceRuleError):
            DailyRule(interval=interval)

    @pytest.mark.parametrize("day_of_week", [-1, 7])
    def test_rejects_day_of_week_out_of_range(self, day_of_week):
        """Weekly day_of_week must lie in 0..6."""
        with pytest.raises(InvalidRecurrenceRuleError):
            WeeklyRule(day_of_week=day_of_week)

    @pytest.mark.parametrize("day_of_month", [0, 32])
    def test_rejects_day_of_month_out_of_range(self, day_of_month):
        """Monthly day_of_month must lie in 1..31."""
        with pytest.raises(InvalidRecurrenceRuleError):
            MonthlyRule(day_of_month=day_of_month)

    @pytest.mark.parametrize("month", [0, 13])
    def test_rejects_month_out_of_range(self, month):
        """Yearly month must lie in 1..12."""
        with pytest.raises(InvalidRecurrenceRuleError):
            YearlyRule(month=month)

    def test_accepts_day_missing_from_month(self):
        """Each field is in range, so February 30 is a valid if empty rule."""
        rule = YearlyRule(month=2, day_of_month=30)
        assert (rule.month, rule.day_of_month) == (2, 30)

    def test_accepts_leap_day(self):
        """February 29 is a valid yearly rule."""
        rule = YearlyRule(month=2, day_of_month=29)
        assert rule.type is RecurrenceType.YEARLY

    def test_validation_error_is_domain_error(self):
        """Rule errors carry the INVALID_RECURRENCE_RULE code."""
        with pytest.raises(ValidationError) as excinfo:
            WeeklyRule(interval=0)
        assert isinstance(excinfo.value, DomainError)
        assert excinfo.value.code is ErrorCode.INVALID_RECURRENCE_RULE
        assert str(excinfo.value).startswith("INVALID_RECURRENCE_RULE: ")

    def test_weekday_name_uses_sunday_as_zero(self):
        """Day 0 is Sunday."""
        assert WeeklyRule(day_of_week=0).weekday_name == "Sunday"
        assert WeeklyRule(day_of_week=1).weekday_name == "Monday"
        assert WeeklyRule().weekday_name is None

    def test_rule_from_fields_builds_variant(self):
        """Flat columns map to the matching variant."""
        rule = rule_from_fields("monthly", interval=2, day_of_month=15)
        assert rule == MonthlyRule(interval=2, day_of_month=15)

    def test_rule_from_fields_rejects_stray_fields(self):
        """A daily rule cannot carry a weekday."""
        with pytest.raises(InvalidRecurrenceRuleError):
            rule_from_fields("daily", day_of_week=1)

    def test_rule_from_fields_rejects_unknown_type(self):
        """Only the four recurrence types exist."""
        with pytest.raises(InvalidRecurrenceRuleError):
            rule_from_fields("hourly")

    def test_rule_to_fields_flattens(self):
        """Fields a variant does not have are stored as None."""
        assert rule_to_fields(YearlyRule(interval=3, month=6)) == {
            "recurrence_type": "yearly",
            "recurrence_interval": 3,
            "recurrence_day_of_week": None,
            "recurrence_day_of_month": None,
            "recurrence_month": 6,
        }


class TestTimeWindow:
    """Tests for TimeWindow value object."""

    def test_rejects_end_before_start(self):
        """End must not precede start."""
        with pytest.raises(InvalidTimeWindowError):
            TimeWindow(datetime(2024, 1, 2), datetime(2024, 1, 1))

    def test_overlapping_windows(self):
        """Windows sharing an interior span overlap."""
        a = TimeWindow(datetime(2024, 1, 1, 9), datetime(2024, 1, 7, 17))
        b = TimeWindow(datetime(2024, 1, 5, 9), datetime(2024, 1, 10, 17))
        assert a.overlaps(b)
        assert b.overlaps(a)

    def test_touching_windows_do_not_overlap(self):
        """A window ending exactly where another starts is allowed."""
        a = TimeWindow(datetime(2024, 1, 1), datetime(2024, 1, 8))
        b = TimeWindow(datetime(2024, 1, 8), datetime(2024, 1, 15))
        assert not a.overlaps(b)
        assert not b.overlaps(a)

    def test_contained_window_overlaps(self):
        """A window inside another overlaps it."""
        outer = TimeWindow(datetime(2024, 1, 1), datetime(2024, 12, 31))
        inner = TimeWindow(datetime(2024, 3, 1), datetime(2024, 3, 2))
        assert outer.overlaps(inner)

    def test_intersects_dates(self):
        """Date intersection is inclusive at both ends."""
        window = TimeWindow(datetime(2024, 1, 8, 14), datetime(2024, 1, 14, 23, 59, 59))
        assert window.intersects_dates(date(2024, 1, 14), date(2024, 1, 20))
        assert not window.intersects_dates(date(2024, 1, 1), date(2024, 1, 7))


class TestEventId:
    """Tests for EventId value object."""

    def test_from_string_valid_uuid(self):
        """EventId.from_string parses valid UUID."""
        value = uuid.uuid4()
        assert EventId.from_string(str(value)).value == value

    def test_from_string_invalid_uuid(self):
        """EventId.from_string raises InvalidEventIdError for invalid UUID."""
        with pytest.raises(InvalidEventIdError):
            EventId.from_string("not-a-uuid")


class TestScheduleException:
    """Tests for exception field validation."""

    def test_cancellation_rejects_modified_fields(self, make_schedule, make_exception):
        """A cancellation with a new date is contradictory."""
        schedule = make_schedule(datetime(2024, 1, 1, 9), datetime(2024, 1, 7, 10))
        with pytest.raises(InvalidExceptionError):
            make_exception(
                schedule, date(2024, 1, 3), ExceptionType.CANCELLED, modified_date=date(2024, 1, 4)
            )

    def test_move_and_retime_flags(self, make_schedule, make_exception):
        """A modified date different from the exception date is a move."""
        schedule = make_schedule(datetime(2024, 1, 1, 9), datetime(2024, 1, 7, 10))
        move = make_exception(
            schedule, date(2024, 1, 3), ExceptionType.MODIFIED, modified_date=date(2024, 1, 5)
        )
        retime = make_exception(
            schedule, date(2024, 1, 4), ExceptionType.MODIFIED, modified_start=time(11)
        )
        same_day = make_exception(
            schedule, date(2024, 1, 6), ExceptionType.MODIFIED, modified_date=date(2024, 1, 6)
        )
        assert move.is_move and not move.is_retime
        assert retime.is_retime and not retime.is_move
        assert same_day.is_retime
