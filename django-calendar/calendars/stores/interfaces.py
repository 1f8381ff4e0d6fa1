"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, time
from typing import Any

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


class CalendarStore(ABC):
    """Interface for event, schedule and exception persistence."""

    # Transactions and locking

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a context manager running its block in one transaction."""
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> AbstractContextManager[Event | None]:
        """Open a transaction holding a per-event write lock.

        Yields the locked event, or None if it does not exist. The lock is
        released when the block exits; an exception rolls the block back.
        """
        ...

    # Events

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by created_at descending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def event_exists(self, event_id: EventId) -> bool:
        """Check if an event exists."""
        ...

    @abstractmethod
    def create_event(
        self,
        name: str,
        description: str = "",
        category: str = "",
        priority: int = 1,
        status: str = "active",
        metadata: dict[str, Any] | None = None,
    ) -> Event:
        ...

    @abstractmethod
    def update_event(self, event_id: EventId, **changes: Any) -> Event | None:
        """Apply field changes to an event; None if it does not exist."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> bool:
        """Delete an event and, by cascade, its schedules and exceptions."""
        ...

    # Schedules

    @abstractmethod
    def get_schedule(self, schedule_id: ScheduleId) -> Schedule | None:
        ...

    @abstractmethod
    def list_schedules_for_event(self, event_id: EventId) -> list[Schedule]:
        """Return all schedules of an event, ordered by window start."""
        ...

    @abstractmethod
    def insert_schedule(
        self,
        event_id: EventId,
        window: TimeWindow,
        rule: RecurrenceRule,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> Schedule:
        """Persist a schedule. Callers are responsible for the overlap check."""
        ...

    @abstractmethod
    def update_schedule(
        self,
        schedule_id: ScheduleId,
        window: TimeWindow,
        rule: RecurrenceRule,
        description: str,
        metadata: dict[str, Any],
    ) -> Schedule:
        """Overwrite a schedule's mutable fields. Callers check overlap."""
        ...

    @abstractmethod
    def delete_schedule(self, schedule_id: ScheduleId) -> bool:
        """Delete a schedule and, by cascade, its exceptions."""
        ...

    # Exceptions

    @abstractmethod
    def get_exception(self, exception_id: ExceptionId) -> ScheduleException | None:
        ...

    @abstractmethod
    def list_exceptions_for_schedule(self, schedule_id: ScheduleId) -> list[ScheduleException]:
        """Return a schedule's exceptions ordered by exception_date."""
        ...

    @abstractmethod
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
        """Persist an exception.

        Raises:
            ScheduleNotFoundError: If the schedule does not exist.
            DuplicateExceptionError: If the schedule already has an
                exception for exception_date.
        """
        ...

    @abstractmethod
    def update_exception(self, exception_id: ExceptionId, **changes: Any) -> ScheduleException | None:
        ...

    @abstractmethod
    def delete_exception(self, exception_id: ExceptionId) -> bool:
        ...

    # Read path

    @abstractmethod
    def load_snapshots(
        self,
        range_start: date,
        range_end: date,
        event_id: EventId | None = None,
    ) -> list[ScheduleSnapshot]:
        """Return every schedule whose window intersects the date range.

        Each snapshot carries the schedule, its event's name and all of its
        exceptions, read together from one consistent view of the store.
        Restrict to one event when event_id is given.
        """
        ...

    @abstractmethod
    def count_schedules_and_exceptions(self, event_id: EventId) -> tuple[int, int]:
        ...
