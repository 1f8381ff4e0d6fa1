"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models

from calendars.domain.value_objects import ExceptionType, RecurrenceType

RECURRENCE_TYPE_CHOICES = [(t.value, t.value) for t in RecurrenceType]
EXCEPTION_TYPE_CHOICES = [(t.value, t.value) for t in ExceptionType]


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    priority = models.IntegerField(default=1)
    status = models.CharField(max_length=50, default="active")
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category"]),
            models.Index(fields=["status"]),
            models.Index(fields=["priority"]),
        ]

    def __str__(self) -> str:
        return self.name


class Schedule(models.Model):
    """Persistence model for an event's recurrence configuration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="schedules")
    description = models.TextField(blank=True, default="")
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    recurrence_type = models.CharField(max_length=10, choices=RECURRENCE_TYPE_CHOICES)
    recurrence_interval = models.PositiveIntegerField(default=1)
    recurrence_day_of_week = models.PositiveSmallIntegerField(null=True, blank=True)
    recurrence_day_of_month = models.PositiveSmallIntegerField(null=True, blank=True)
    recurrence_month = models.PositiveSmallIntegerField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date"]
        indexes = [
            models.Index(fields=["event", "start_date"]),
            models.Index(fields=["end_date"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(recurrence_interval__gt=0),
                name="schedule_valid_recurrence_interval",
            ),
            models.CheckConstraint(
                condition=models.Q(recurrence_day_of_week__isnull=True)
                | models.Q(recurrence_day_of_week__range=(0, 6)),
                name="schedule_valid_day_of_week",
            ),
            models.CheckConstraint(
                condition=models.Q(recurrence_day_of_month__isnull=True)
                | models.Q(recurrence_day_of_month__range=(1, 31)),
                name="schedule_valid_day_of_month",
            ),
            models.CheckConstraint(
                condition=models.Q(recurrence_month__isnull=True)
                | models.Q(recurrence_month__range=(1, 12)),
                name="schedule_valid_month",
            ),
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="schedule_valid_window",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event.name} - {self.recurrence_type} from {self.start_date}"


class ScheduleException(models.Model):
    """Persistence model for per-date overrides of a schedule."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    schedule = models.ForeignKey(
        Schedule, on_delete=models.CASCADE, related_name="exceptions"
    )
    exception_date = models.DateField()
    exception_type = models.CharField(max_length=10, choices=EXCEPTION_TYPE_CHOICES)
    modified_date = models.DateField(null=True, blank=True)
    modified_start_time = models.TimeField(null=True, blank=True)
    modified_end_time = models.TimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["exception_date"]
        indexes = [
            models.Index(fields=["exception_date"]),
            models.Index(fields=["exception_type"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["schedule", "exception_date"],
                name="unique_exception_per_schedule_date",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.exception_type} {self.exception_date}"
