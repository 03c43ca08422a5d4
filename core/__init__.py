"""
Core business logic - platform-agnostic.
Used by the web API, the Discord bot and the background scheduler.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, is_configured

# Domain records
from .enums import RegistrationStatus, ScheduleKind
from .models import ChatBinding, Event, Registration, Schedule

# Timezone utilities
from .timezone import get_target_tz, now_in_target_timezone

__all__ = [
    # Database (SQLAlchemy)
    'get_connection', 'get_transaction', 'get_engine', 'close_engine', 'is_configured',
    # Domain
    'RegistrationStatus', 'ScheduleKind',
    'ChatBinding', 'Event', 'Registration', 'Schedule',
    # Timezone
    'get_target_tz', 'now_in_target_timezone',
]
