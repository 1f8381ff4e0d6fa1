from calendars.domain.models import (
    Event,
    EventSummary,
    Projection,
    ProjectionKind,
    Schedule,
    ScheduleException,
    ScheduleSnapshot,
)
from calendars.domain.value_objects import (
    DailyRule,
    EventId,
    ExceptionId,
    ExceptionType,
    MonthlyRule,
    RecurrenceRule,
    RecurrenceType,
    ScheduleId,
    TimeWindow,
    WeeklyRule,
    YearlyRule,
)

__all__ = [
    "Event",
    "Schedule",
    "ScheduleException",
    "ScheduleSnapshot",
    "Projection",
    "ProjectionKind",
    "EventSummary",
    "EventId",
    "ScheduleId",
    "ExceptionId",
    "TimeWindow",
    "RecurrenceType",
    "ExceptionType",
    "RecurrenceRule",
    "DailyRule",
    "WeeklyRule",
    "MonthlyRule",
    "YearlyRule",
]
