"""Expansion of a schedule's recurrence rule into candidate occurrences.

Every rule class has two forms that must agree:

- a per-day predicate (`occurs_on`), the reference definition, and
- a stepper that jumps straight from one candidate to the next, used by
  `expand` so cost grows with the number of occurrences rather than days.

All arithmetic is anchored at the schedule's own start date.
"""

import calendar
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from calendars.domain.models import Schedule
from calendars.domain.value_objects import DailyRule, MonthlyRule, WeeklyRule, YearlyRule


@dataclass(frozen=True)
class Occurrence:
    """A candidate date paired with the schedule's wall-clock times."""

    day: date
    start_time: time
    end_time: time

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.day, self.start_time)

    @property
    def ends_at(self) -> datetime:
        ends = datetime.combine(self.day, self.end_time)
        if self.end_time < self.start_time:
            ends += timedelta(days=1)
        return ends


def sunday_based_weekday(day: date) -> int:
    """Weekday number with 0 for Sunday through 6 for Saturday."""
    return day.isoweekday() % 7


def effective_window(schedule: Schedule, range_start: date, range_end: date) -> tuple[date, date] | None:
    """Intersect the query range with the schedule window, or None when empty."""
    first = max(range_start, schedule.window.start.date())
    last = min(range_end, schedule.window.end.date())
    if first > last:
        return None
    return first, last


def _month_index(day: date) -> int:
    return day.year * 12 + day.month - 1


def _round_up(value: int, step: int) -> int:
    return -(-value // step) * step


def _has_day(year: int, month: int, day: int) -> bool:
    return day <= calendar.monthrange(year, month)[1]


# Predicates


def _daily_matches(rule: DailyRule, anchor: date, day: date) -> bool:
    return (day - anchor).days % rule.interval == 0


def _weekly_matches(rule: WeeklyRule, anchor: date, day: date) -> bool:
    dow = rule.day_of_week if rule.day_of_week is not None else sunday_based_weekday(anchor)
    if sunday_based_weekday(day) != dow:
        return False
    return ((day - anchor).days // 7) % rule.interval == 0


def _monthly_matches(rule: MonthlyRule, anchor: date, day: date) -> bool:
    dom = rule.day_of_month if rule.day_of_month is not None else anchor.day
    if day.day != dom:
        return False
    offset = _month_index(day) - _month_index(anchor)
    return offset >= 0 and offset % rule.interval == 0


def _yearly_matches(rule: YearlyRule, anchor: date, day: date) -> bool:
    month = rule.month if rule.month is not None else anchor.month
    dom = rule.day_of_month if rule.day_of_month is not None else anchor.day
    if day.month != month or day.day != dom:
        return False
    return (day.year - anchor.year) % rule.interval == 0


# Steppers. `first` is never before `anchor`.


def _daily_steps(rule: DailyRule, anchor: date, first: date, last: date) -> Iterator[date]:
    offset = _round_up((first - anchor).days, rule.interval)
    day = anchor + timedelta(days=offset)
    step = timedelta(days=rule.interval)
    while day <= last:
        yield day
        day += step


def _weekly_steps(rule: WeeklyRule, anchor: date, first: date, last: date) -> Iterator[date]:
    dow = rule.day_of_week if rule.day_of_week is not None else sunday_based_weekday(anchor)
    # Week k spans anchor + 7k .. anchor + 7k + 6 and holds exactly one `dow`.
    shift = (dow - sunday_based_weekday(anchor)) % 7
    week = max(0, -(-((first - anchor).days - shift) // 7))
    week = _round_up(week, rule.interval)
    day = anchor + timedelta(days=7 * week + shift)
    step = timedelta(days=7 * rule.interval)
    while day <= last:
        yield day
        day += step


def _monthly_steps(rule: MonthlyRule, anchor: date, first: date, last: date) -> Iterator[date]:
    dom = rule.day_of_month if rule.day_of_month is not None else anchor.day
    offset = _round_up(_month_index(first) - _month_index(anchor), rule.interval)
    index = _month_index(anchor) + offset
    while index <= _month_index(last):
        year, month0 = divmod(index, 12)
        if _has_day(year, month0 + 1, dom):
            day = date(year, month0 + 1, dom)
            if first <= day <= last:
                yield day
        index += rule.interval


def _yearly_steps(rule: YearlyRule, anchor: date, first: date, last: date) -> Iterator[date]:
    month = rule.month if rule.month is not None else anchor.month
    dom = rule.day_of_month if rule.day_of_month is not None else anchor.day
    year = anchor.year + _round_up(first.year - anchor.year, rule.interval)
    while year <= last.year:
        if _has_day(year, month, dom):
            day = date(year, month, dom)
            if first <= day <= last:
                yield day
        year += rule.interval


_PREDICATES: dict[type, Callable[..., bool]] = {
    DailyRule: _daily_matches,
    WeeklyRule: _weekly_matches,
    MonthlyRule: _monthly_matches,
    YearlyRule: _yearly_matches,
}

_STEPPERS: dict[type, Callable[..., Iterator[date]]] = {
    DailyRule: _daily_steps,
    WeeklyRule: _weekly_steps,
    MonthlyRule: _monthly_steps,
    YearlyRule: _yearly_steps,
}


def occurs_on(schedule: Schedule, day: date) -> bool:
    """Return True if `day` is a regular occurrence of the schedule."""
    if effective_window(schedule, day, day) is None:
        return False
    predicate = _PREDICATES[type(schedule.rule)]
    return predicate(schedule.rule, schedule.window.start.date(), day)


def expand_dates(schedule: Schedule, range_start: date, range_end: date) -> Iterator[date]:
    """Yield the schedule's occurrence dates inside the range, ascending."""
    window = effective_window(schedule, range_start, range_end)
    if window is None:
        return
    stepper = _STEPPERS[type(schedule.rule)]
    yield from stepper(schedule.rule, schedule.window.start.date(), *window)


def expand(schedule: Schedule, range_start: date, range_end: date) -> Iterator[Occurrence]:
    """Yield candidate occurrences with the schedule's base times attached.

    The result is a fresh generator on every call, so expansion can be
    restarted simply by calling again.
    """
    start_time, end_time = schedule.start_time, schedule.end_time
    for day in expand_dates(schedule, range_start, range_end):
        yield Occurrence(day=day, start_time=start_time, end_time=end_time)
