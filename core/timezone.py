"""
Timezone utilities for the fixed business timezone.
"""

from datetime import date, datetime, time

import pytz

from .config import get_target_timezone


def get_target_tz() -> pytz.BaseTzInfo:
    """Return the pytz zone all schedules are evaluated in."""
    return pytz.timezone(get_target_timezone())


def now_in_target_timezone() -> datetime:
    """Current instant expressed in the target timezone."""
    return datetime.now(pytz.UTC).astimezone(get_target_tz())


def localize_in_target_timezone(day: date, hour: int, minute: int) -> datetime:
    """
    Build an aware datetime for a wall-clock time in the target timezone.

    Args:
        day: Calendar date in the target timezone
        hour: Hour in 24-hour format (0-23)
        minute: Minute (0-59)

    Returns:
        Aware datetime with the zone's offset for that date
    """
    tz = get_target_tz()
    naive = datetime.combine(day, time(hour, minute, 0, 0))
    return tz.localize(naive)

