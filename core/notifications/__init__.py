"""
Scheduled notification system for workshop events.

Public API:
    execute_schedule(schedule_id) - Dispatch one schedule now
    poll_schedules() - One scan of pending schedules
    init_scheduler() / shutdown_scheduler() - Clock loop lifecycle
    compute_fire_instant(schedule) - When a schedule becomes due

High-level actions:
    create_schedule(...) - Ad-hoc schedule for an event
    create_default_schedules(event_id) - Standard reminder/start/material/feedback set
    edit_schedule(schedule_id, **fields) - Operator edits on a pending schedule
    notify_registration_confirmed(registration_id) - Confirmation email + operator alert
"""

from .dispatcher import execute_schedule
from .scheduler import init_scheduler, poll_schedules, shutdown_scheduler
from .timing import compute_fire_instant, is_due
from .actions import (
    create_schedule,
    create_default_schedules,
    edit_schedule,
    notify_registration_confirmed,
)

__all__ = [
    # Low-level
    "execute_schedule",
    "poll_schedules",
    "init_scheduler",
    "shutdown_scheduler",
    "compute_fire_instant",
    "is_due",
    # High-level actions
    "create_schedule",
    "create_default_schedules",
    "edit_schedule",
    "notify_registration_confirmed",
]
