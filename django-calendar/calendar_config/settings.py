"""
Django settings for the recurring calendar engine.

Everything is read from the environment; a local .env file is honoured.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-calendar-engine-local-only")

DEBUG = os.getenv("DEBUG", "False") == "True"

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "calendars.apps.CalendarsConfig",
]

# ────────────────────────────────────────────────────────────────
# Databases
# ────────────────────────────────────────────────────────────────
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("POSTGRES_DB", "calendar"),
        "USER": os.getenv("POSTGRES_USER", "postgres"),
        "PASSWORD": os.getenv("POSTGRES_PASSWORD", "postgres"),
        "HOST": os.getenv("POSTGRES_HOST", "localhost"),
        "PORT": os.getenv("POSTGRES_PORT", "5432"),
    }
}

if os.getenv("USE_SQLITE", "True") == "True":
    # IMMEDIATE takes the write lock as soon as atomic() begins.
    DATABASES["default"] = {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("SQLITE_PATH", str(BASE_DIR / "db.sqlite3")),
        "OPTIONS": {
            "transaction_mode": "IMMEDIATE",
            "timeout": int(os.getenv("SQLITE_TIMEOUT", "20")),
        },
        # Shared-cache memory databases fail with "table is locked" instead of
        # waiting, so threaded tests need a file.
        "TEST": {"NAME": os.getenv("SQLITE_TEST_PATH", str(BASE_DIR / "test_db.sqlite3"))},
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Schedules carry wall-clock timestamps; no zone conversion happens anywhere.
TIME_ZONE = "UTC"
USE_TZ = False
USE_I18N = False

# ────────────────────────────────────────────────────────────────
# Calendar engine
# ────────────────────────────────────────────────────────────────
CALENDAR_UPCOMING_DAYS = int(os.getenv("CALENDAR_UPCOMING_DAYS", "365"))
CALENDAR_MAX_RANGE_DAYS = int(os.getenv("CALENDAR_MAX_RANGE_DAYS", "3660"))

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "plain"}},
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "calendars": {
            "handlers": ["console"],
            "level": os.getenv("CALENDAR_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
