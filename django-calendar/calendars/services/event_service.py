"""Event service - event lifecycle operations.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from typing import Any

from calendars.domain import Event, EventId
from calendars.domain.errors import EventNotFoundError, InvalidEventError
from calendars.stores.interfaces import CalendarStore

logger = logging.getLogger(__name__)


def _validate_event_fields(fields: dict[str, Any]) -> None:
    if "name" in fields:
        name = fields["name"]
        if not isinstance(name, str) or not name.strip():
            raise InvalidEventError("Event name must not be empty")
        if len(name) > 255:
            raise InvalidEventError("Event name must be at most 255 characters")
    if "category" in fields and len(fields["category"] or "") > 100:
        raise InvalidEventError("Event category must be at most 100 characters")
    if "priority" in fields and (
        isinstance(fields["priority"], bool) or not isinstance(fields["priority"], int)
    ):
        raise InvalidEventError("Event priority must be an integer")
    if "metadata" in fields and not isinstance(fields["metadata"], dict):
        raise InvalidEventError("Event metadata must be a mapping")


class EventService:
    """Service for event catalog operations."""

    def __init__(self, store: CalendarStore) -> None:
        self._store = store

    def list_events(self) -> list[Event]:
        """Return all events."""
        return self._store.list_events()

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        eid = EventId.from_string(str(event_id))
        event = self._store.get_event(eid)
        if event is None:
            raise EventNotFoundError(str(eid))
        return event

    def create_event(
        self,
        name: str,
        description: str = "",
        category: str = "",
        priority: int = 1,
        status: str = "active",
        metadata: dict[str, Any] | None = None,
    ) -> Event:
        fields = {
            "name": name,
            "description": description,
            "category": category,
            "priority": priority,
            "status": status,
            "metadata": metadata if metadata is not None else {},
        }
        _validate_event_fields(fields)
        event = self._store.create_event(**fields)
        logger.info("Created event %s (%s)", event.id, event.name)
        return event

    def update_event(self, event_id: str, **changes: Any) -> Event:
        """Apply changes to name, description, category, priority, status or metadata.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            InvalidEventError: If a changed field is invalid.
        """
        eid = EventId.from_string(str(event_id))
        _validate_event_fields(changes)
        event = self._store.update_event(eid, **changes)
        if event is None:
            raise EventNotFoundError(str(eid))
        logger.info("Updated event %s: %s", eid, ", ".join(sorted(changes)) or "no changes")
        return event

    def delete_event(self, event_id: str) -> None:
        """Delete an event together with its schedules and their exceptions.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        eid = EventId.from_string(str(event_id))
        if not self._store.delete_event(eid):
            raise EventNotFoundError(str(eid))
        logger.info("Deleted event %s", eid)
