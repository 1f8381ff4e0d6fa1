"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import ClassVar, Self
from uuid import UUID

from calendars.domain.errors import (
    InvalidEventIdError,
    InvalidExceptionIdError,
    InvalidRecurrenceRuleError,
    InvalidScheduleIdError,
    InvalidTimeWindowError,
)

_WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def _parse_uuid(value: str, error: type[Exception]) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise error() from None


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=_parse_uuid(value, InvalidEventIdError))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ScheduleId:
    """Unique identifier for a Schedule."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=_parse_uuid(value, InvalidScheduleIdError))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ExceptionId:
    """Unique identifier for a ScheduleException."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=_parse_uuid(value, InvalidExceptionIdError))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TimeWindow:
    """Closed [start, end] span of wall-clock timestamps owned by a schedule."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidTimeWindowError(
                f"Window end {self.end.isoformat()} is before start {self.start.isoformat()}"
            )

    def overlaps(self, other: "TimeWindow") -> bool:
        """Half-open overlap test; windows that only touch do not overlap."""
        return self.start < other.end and other.start < self.end

    def intersects_dates(self, first: date, last: date) -> bool:
        return self.start.date() <= last and self.end.date() >= first

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()}]"


class RecurrenceType(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ExceptionType(Enum):
    CANCELLED = "cancelled"
    MODIFIED = "modified"


def _check_interval(interval: int) -> None:
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        raise InvalidRecurrenceRuleError(f"interval must be a positive integer, got {interval!r}")


def _check_range(name: str, value: int | None, low: int, high: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidRecurrenceRuleError(f"{name} must be between {low} and {high}, got {value!r}")


@dataclass(frozen=True)
class DailyRule:
    """Every `interval` days counted from the schedule start."""

    type: ClassVar[RecurrenceType] = RecurrenceType.DAILY

    interval: int = 1

    def __post_init__(self) -> None:
        _check_interval(self.interval)


@dataclass(frozen=True)
class WeeklyRule:
    """One weekday in every `interval`-th week; 0 is Sunday."""

    type: ClassVar[RecurrenceType] = RecurrenceType.WEEKLY

    interval: int = 1
    day_of_week: int | None = None

    def __post_init__(self) -> None:
        _check_interval(self.interval)
        _check_range("day_of_week", self.day_of_week, 0, 6)

    @property
    def weekday_name(self) -> str | None:
        if self.day_of_week is None:
            return None
        return _WEEKDAY_NAMES[self.day_of_week]


@dataclass(frozen=True)
class MonthlyRule:
    """One day of month in every `interval`-th month, never clamped."""

    type: ClassVar[RecurrenceType] = RecurrenceType.MONTHLY

    interval: int = 1
    day_of_month: int | None = None

    def __post_init__(self) -> None:
        _check_interval(self.interval)
        _check_range("day_of_month", self.day_of_month, 1, 31)


@dataclass(frozen=True)
class YearlyRule:
    """One calendar day in every `interval`-th year."""

    type: ClassVar[RecurrenceType] = RecurrenceType.YEARLY

    interval: int = 1
    month: int | None = None
    day_of_month: int | None = None

    def __post_init__(self) -> None:
        _check_interval(self.interval)
        _check_range("month", self.month, 1, 12)
        _check_range("day_of_month", self.day_of_month, 1, 31)


RecurrenceRule = DailyRule | WeeklyRule | MonthlyRule | YearlyRule

_RULE_CLASSES: dict[RecurrenceType, type] = {
    RecurrenceType.DAILY: DailyRule,
    RecurrenceType.WEEKLY: WeeklyRule,
    RecurrenceType.MONTHLY: MonthlyRule,
    RecurrenceType.YEARLY: YearlyRule,
}


def rule_from_fields(
    recurrence_type: RecurrenceType | str,
    interval: int = 1,
    day_of_week: int | None = None,
    day_of_month: int | None = None,
    month: int | None = None,
) -> RecurrenceRule:
    """Build a rule from the flat column layout used by the store.

    Fields that do not belong to the variant must be None.
    """
    try:
        rtype = RecurrenceType(recurrence_type)
    except ValueError:
        raise InvalidRecurrenceRuleError(f"unknown recurrence type {recurrence_type!r}") from None

    extra = {"day_of_week": day_of_week, "day_of_month": day_of_month, "month": month}
    allowed = {
        RecurrenceType.DAILY: (),
        RecurrenceType.WEEKLY: ("day_of_week",),
        RecurrenceType.MONTHLY: ("day_of_month",),
        RecurrenceType.YEARLY: ("month", "day_of_month"),
    }[rtype]
    stray = sorted(name for name, value in extra.items() if value is not None and name not in allowed)
    if stray:
        raise InvalidRecurrenceRuleError(
            f"{rtype.value} rules do not take {', '.join(stray)}"
        )
    return _RULE_CLASSES[rtype](interval=interval, **{name: extra[name] for name in allowed})


def rule_to_fields(rule: RecurrenceRule) -> dict:
    """Flatten a rule into recurrence_* column values."""
    return {
        "recurrence_type": rule.type.value,
        "recurrence_interval": rule.interval,
        "recurrence_day_of_week": getattr(rule, "day_of_week", None),
        "recurrence_day_of_month": getattr(rule, "day_of_month", None),
        "recurrence_month": getattr(rule, "month", None),
    }
