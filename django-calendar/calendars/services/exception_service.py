"""Exception service - cancel, retime or move single occurrences."""

import logging
from datetime import date, time
from typing import Any

from calendars.domain import ExceptionId, ExceptionType, ScheduleException, ScheduleId
from calendars.domain.errors import ExceptionNotFoundError, InvalidExceptionError, ScheduleNotFoundError
from calendars.domain.models import validate_exception_fields
from calendars.stores.interfaces import CalendarStore

logger = logging.getLogger(__name__)


class ExceptionService:
    """Per-occurrence overrides of a schedule. The rule itself never changes."""

    def __init__(self, store: CalendarStore) -> None:
        self._store = store

    def cancel_occurrence(
        self, schedule_id: str, occurrence_date: date, notes: str = ""
    ) -> ScheduleException:
        """Suppress the schedule's occurrence on occurrence_date."""
        return self._record(schedule_id, occurrence_date, ExceptionType.CANCELLED, notes=notes)

    def retime_occurrence(
        self,
        schedule_id: str,
        occurrence_date: date,
        start: time | None = None,
        end: time | None = None,
        notes: str = "",
    ) -> ScheduleException:
        """Keep the occurrence on its date but change its start and/or end time."""
        if start is None and end is None:
            raise InvalidExceptionError("A retime needs a new start or end time")
        return self._record(
            schedule_id,
            occurrence_date,
            ExceptionType.MODIFIED,
            modified_start=start,
            modified_end=end,
            notes=notes,
        )

    def move_occurrence(
        self,
        schedule_id: str,
        occurrence_date: date,
        new_date: date,
        start: time | None = None,
        end: time | None = None,
        notes: str = "",
    ) -> ScheduleException:
        """Relocate the occurrence to new_date, optionally with new times."""
        if new_date == occurrence_date:
            raise InvalidExceptionError("A move needs a date different from the occurrence date")
        return self._record(
            schedule_id,
            occurrence_date,
            ExceptionType.MODIFIED,
            modified_date=new_date,
            modified_start=start,
            modified_end=end,
            notes=notes,
        )

    def get_exception(self, exception_id: str) -> ScheduleException:
        xid = ExceptionId.from_string(str(exception_id))
        exception = self._store.get_exception(xid)
        if exception is None:
            raise ExceptionNotFoundError(str(xid))
        return exception

    def list_exceptions(self, schedule_id: str) -> list[ScheduleException]:
        sid = ScheduleId.from_string(str(schedule_id))
        if self._store.get_schedule(sid) is None:
            raise ScheduleNotFoundError(str(sid))
        return self._store.list_exceptions_for_schedule(sid)

    def update_exception(self, exception_id: str, **changes: Any) -> ScheduleException:
        """Change fields of an existing exception.

        Accepted fields: exception_date, exception_type, modified_date,
        modified_start, modified_end, notes, metadata.
        """
        current = self.get_exception(exception_id)
        if "exception_type" in changes:
            changes["exception_type"] = ExceptionType(changes["exception_type"])
        merged = {
            name: changes.get(name, getattr(current, name))
            for name in ("exception_type", "modified_date", "modified_start", "modified_end")
        }
        validate_exception_fields(**merged)

        exception = self._store.update_exception(current.id, **changes)
        if exception is None:
            raise ExceptionNotFoundError(str(current.id))
        logger.info("Updated exception %s of schedule %s", exception.id, exception.schedule_id)
        return exception

    def delete_exception(self, exception_id: str) -> None:
        xid = ExceptionId.from_string(str(exception_id))
        if not self._store.delete_exception(xid):
            raise ExceptionNotFoundError(str(xid))
        logger.info("Deleted exception %s", xid)

    def _record(
        self,
        schedule_id: str,
        occurrence_date: date,
        exception_type: ExceptionType,
        modified_date: date | None = None,
        modified_start: time | None = None,
        modified_end: time | None = None,
        notes: str = "",
    ) -> ScheduleException:
        sid = ScheduleId.from_string(str(schedule_id))
        validate_exception_fields(exception_type, modified_date, modified_start, modified_end)
        with self._store.atomic():
            if self._store.get_schedule(sid) is None:
                raise ScheduleNotFoundError(str(sid))
            exception = self._store.insert_exception(
                sid,
                occurrence_date,
                exception_type,
                modified_date=modified_date,
                modified_start=modified_start,
                modified_end=modified_end,
                notes=notes,
            )
        logger.info(
            "Recorded %s exception %s on %s for schedule %s",
            exception_type.value,
            exception.id,
            occurrence_date,
            sid,
        )
        return exception
