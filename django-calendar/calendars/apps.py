from django.apps import AppConfig


class CalendarsConfig(AppConfig):
    name = "calendars"
    verbose_name = "Recurring calendars"
    default_auto_field = "django.db.models.BigAutoField"
