"""Domain error codes for the calendars module."""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    SCHEDULE_NOT_FOUND = "SCHEDULE_NOT_FOUND"
    EXCEPTION_NOT_FOUND = "EXCEPTION_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    INVALID_SCHEDULE_ID = "INVALID_SCHEDULE_ID"
    INVALID_EXCEPTION_ID = "INVALID_EXCEPTION_ID"
    INVALID_EVENT = "INVALID_EVENT"
    INVALID_RECURRENCE_RULE = "INVALID_RECURRENCE_RULE"
    INVALID_TIME_WINDOW = "INVALID_TIME_WINDOW"
    INVALID_EXCEPTION = "INVALID_EXCEPTION"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    SCHEDULING_CONFLICT = "SCHEDULING_CONFLICT"
    DUPLICATE_EXCEPTION = "DUPLICATE_EXCEPTION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when an operation references an entity that does not exist."""


class EventNotFoundError(NotFoundError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message=f"Event {event_id} not found",
        )
        self.event_id = event_id


class ScheduleNotFoundError(NotFoundError):
    """Raised when a schedule is not found."""

    def __init__(self, schedule_id: str) -> None:
        super().__init__(
            code=ErrorCode.SCHEDULE_NOT_FOUND,
            message=f"Schedule {schedule_id} not found",
        )
        self.schedule_id = schedule_id


class ExceptionNotFoundError(NotFoundError):
    """Raised when a schedule exception is not found."""

    def __init__(self, exception_id: str) -> None:
        super().__init__(
            code=ErrorCode.EXCEPTION_NOT_FOUND,
            message=f"Exception {exception_id} not found",
        )
        self.exception_id = exception_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class InvalidScheduleIdError(DomainError):
    """Raised when a schedule ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SCHEDULE_ID,
            message="Invalid schedule ID format",
        )


class InvalidExceptionIdError(DomainError):
    """Raised when an exception ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EXCEPTION_ID,
            message="Invalid exception ID format",
        )


class ValidationError(DomainError):
    """Raised when input is rejected before anything is persisted."""


class InvalidEventError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_EVENT, message=message)


class InvalidRecurrenceRuleError(ValidationError):
    """Raised for out-of-range recurrence parameters."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_RECURRENCE_RULE, message=message)


class InvalidTimeWindowError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TIME_WINDOW, message=message)


class InvalidExceptionError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_EXCEPTION, message=message)


class InvalidDateRangeError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_DATE_RANGE, message=message)


class SchedulingConflictError(DomainError):
    """Raised when a schedule write would overlap a sibling schedule."""

    def __init__(
        self,
        event_id: str,
        window: str,
        conflicting_schedule_id: str,
        conflicting_window: str,
    ) -> None:
        super().__init__(
            code=ErrorCode.SCHEDULING_CONFLICT,
            message=(
                f"Schedule window {window} overlaps schedule "
                f"{conflicting_schedule_id} ({conflicting_window}) for event {event_id}"
            ),
        )
        self.event_id = event_id
        self.conflicting_schedule_id = conflicting_schedule_id


class DuplicateExceptionError(DomainError):
    """Raised when a schedule already has an exception for a date."""

    def __init__(self, schedule_id: str, exception_date: date) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_EXCEPTION,
            message=(
                f"Schedule {schedule_id} already has an exception "
                f"for {exception_date.isoformat()}"
            ),
        )
        self.schedule_id = schedule_id
        self.exception_date = exception_date
