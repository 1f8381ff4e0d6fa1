from dataclasses import dataclass

from django.conf import settings

from calendars.services.event_service import EventService
from calendars.services.exception_service import ExceptionService
from calendars.services.overlap_guard import OverlapGuard
from calendars.services.projection_service import (
    DEFAULT_MAX_RANGE_DAYS,
    DEFAULT_UPCOMING_DAYS,
    ProjectionQueryService,
)
from calendars.services.schedule_service import ScheduleService
from calendars.services.transition_service import ScheduleTransitionCoordinator
from calendars.stores.interfaces import CalendarStore

__all__ = [
    "CalendarServices",
    "EventService",
    "ExceptionService",
    "OverlapGuard",
    "ProjectionQueryService",
    "ScheduleService",
    "ScheduleTransitionCoordinator",
    "build_services",
]


@dataclass(frozen=True)
class CalendarServices:
    events: EventService
    schedules: ScheduleService
    exceptions: ExceptionService
    transitions: ScheduleTransitionCoordinator
    projections: ProjectionQueryService


def build_services(store: CalendarStore | None = None) -> CalendarServices:
    """Wire every service over one store, configured from Django settings."""
    if store is None:
        from calendars.stores.django_store import DjangoCalendarStore

        store = DjangoCalendarStore()
    guard = OverlapGuard(store)
    return CalendarServices(
        events=EventService(store),
        schedules=ScheduleService(store, guard),
        exceptions=ExceptionService(store),
        transitions=ScheduleTransitionCoordinator(store, guard),
        projections=ProjectionQueryService(
            store,
            max_range_days=getattr(settings, "CALENDAR_MAX_RANGE_DAYS", DEFAULT_MAX_RANGE_DAYS),
            upcoming_days=getattr(settings, "CALENDAR_UPCOMING_DAYS", DEFAULT_UPCOMING_DAYS),
        ),
    )
