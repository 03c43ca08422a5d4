"""
Fire-time calculation for schedules.

A schedule fires at a wall-clock time in the business timezone, a number of
days before (or, for feedback, after) the event date. The host's local zone
plays no part.
"""

from datetime import date, datetime, timedelta

import pytz

from core.enums import ScheduleKind
from core.models import Schedule
from core.timezone import localize_in_target_timezone

DEFAULT_DAYS_BEFORE = 1
DEFAULT_DAYS_AFTER = 1
DEFAULT_HOUR = 9
DEFAULT_MINUTE = 0


class InvalidScheduleError(ValueError):
    """Schedule fields can't be turned into a fire instant."""


def _parse_event_date(value: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        raise InvalidScheduleError(f"Invalid event date: {value!r}")


def compute_fire_instant(schedule: Schedule) -> datetime:
    """
    Absolute instant at which the schedule becomes due.

    Args:
        schedule: Schedule with event_date "YYYY-MM-DD"

    Returns:
        Aware datetime in the target timezone

    Raises:
        InvalidScheduleError: If event_date can't be parsed
    """
    event_day = _parse_event_date(schedule.event_date)

    if schedule.kind == ScheduleKind.feedback:
        days = schedule.days_after
        offset = timedelta(days=DEFAULT_DAYS_AFTER if days is None else days)
        fire_day = event_day + offset
    else:
        days = schedule.days_before
        offset = timedelta(days=DEFAULT_DAYS_BEFORE if days is None else days)
        fire_day = event_day - offset

    hour = DEFAULT_HOUR if schedule.hour is None else schedule.hour
    minute = DEFAULT_MINUTE if schedule.minute is None else schedule.minute
    return localize_in_target_timezone(fire_day, hour, minute)


def is_due(schedule: Schedule, now: datetime) -> bool:
    """True if the schedule is enabled, not yet fired, and its fire instant has passed."""
    if not schedule.enabled or schedule.fired:
        return False
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    return now >= compute_fire_instant(schedule)
