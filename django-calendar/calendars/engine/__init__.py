"""Pure projection pipeline: expand candidates, then overlay exceptions."""

from calendars.engine.expander import Occurrence, expand, expand_dates, occurs_on
from calendars.engine.resolver import ExceptionResolver

__all__ = ["Occurrence", "expand", "expand_dates", "occurs_on", "ExceptionResolver"]
