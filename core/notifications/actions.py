"""
High-level notification actions.

These functions are called by the API routes. They create and edit
schedules and send the one-off registration confirmation.
"""

import asyncio
import logging

from core.enums import RegistrationStatus, ScheduleKind
from core.models import Schedule, new_id
from core.notifications.channels.discord import ChatMessage
from core.notifications.channels.email import send_email
from core.notifications.dispatcher import notify_operators
from core.notifications.results import Ok
from core.notifications.templates import build_event_context, get_message
from core.repositories import get_repository

logger = logging.getLogger(__name__)


# =============================================================================
# Schedule templates - SINGLE SOURCE OF TRUTH for the standard set
# =============================================================================

SCHEDULE_TEMPLATES = {
    ScheduleKind.material: {"days_before": 2, "hour": 18, "minute": 0},
    ScheduleKind.reminder: {"days_before": 1, "hour": 9, "minute": 0},
    ScheduleKind.start: {"days_before": 0, "hour": 8, "minute": 0},
    ScheduleKind.feedback: {"days_after": 1, "hour": 10, "minute": 0},
}


class EventNotFoundError(Exception):
    """The referenced event does not exist."""


class ScheduleNotFoundError(Exception):
    """The referenced schedule does not exist."""


class ScheduleAlreadyFiredError(Exception):
    """A fired schedule is terminal and can't be edited."""


class RegistrationNotFoundError(Exception):
    """The referenced registration does not exist."""


async def create_schedule(
    event_id: str,
    kind: ScheduleKind,
    days_before: int | None = None,
    days_after: int | None = None,
    hour: int | None = None,
    minute: int | None = None,
    enabled: bool = True,
) -> Schedule:
    """
    Create an ad-hoc schedule for an event.

    The event's title and date are copied onto the schedule.

    Raises:
        EventNotFoundError: If the event doesn't exist
    """
    repository = get_repository()
    event = await repository.get_event(event_id)
    if event is None:
        raise EventNotFoundError(event_id)

    schedule = Schedule(
        id=new_id(),
        event_id=event.id,
        event_title=event.title,
        event_date=event.date,
        kind=kind,
        days_before=None if kind == ScheduleKind.feedback else days_before,
        days_after=days_after if kind == ScheduleKind.feedback else None,
        hour=hour,
        minute=minute,
        enabled=enabled,
    )
    await repository.add_schedule(schedule)
    logger.info(f"Created {kind.value} schedule {schedule.id} for event {event.id}")
    return schedule


async def create_default_schedules(event_id: str) -> list[Schedule]:
    """
    Create the standard schedule set for an event.

    Kinds that already have a schedule for this event are skipped, so
    calling this twice doesn't duplicate anything.

    Returns:
        Only the schedules created by this call
    """
    existing = await get_repository().get_schedules(event_id=event_id)
    existing_kinds = {s.kind for s in existing}

    created = []
    for kind, template in SCHEDULE_TEMPLATES.items():
        if kind in existing_kinds:
            continue
        created.append(await create_schedule(event_id, kind, **template))
    return created


async def edit_schedule(schedule_id: str, **fields) -> Schedule:
    """
    Apply operator edits to a pending schedule.

    The day offset the schedule's kind doesn't use is always kept null,
    as in create_schedule.

    Raises:
        ScheduleNotFoundError: If the schedule doesn't exist
        ScheduleAlreadyFiredError: If the schedule has already fired
    """
    repository = get_repository()
    schedule = await repository.get_schedule(schedule_id)
    if schedule is None:
        raise ScheduleNotFoundError(schedule_id)
    if schedule.fired:
        raise ScheduleAlreadyFiredError(schedule_id)

    unused = "days_before" if schedule.kind == ScheduleKind.feedback else "days_after"
    if fields.get(unused) is not None:
        logger.info(f"Ignoring {unused} for {schedule.kind.value} schedule {schedule_id}")
    fields.pop(unused, None)

    updated = await repository.update_schedule(schedule_id, **fields)
    if updated is None:
        raise ScheduleNotFoundError(schedule_id)
    return updated


async def notify_registration_confirmed(registration_id: str) -> dict:
    """
    Send the registration confirmation email and alert operators.

    Args:
        registration_id: Registration to confirm

    Returns:
        Delivery status dict: {"email": bool, "operators": int}

    Raises:
        RegistrationNotFoundError: If the registration or its event is missing
    """
    repository = get_repository()
    registration = await repository.get_registration(registration_id)
    if registration is None:
        raise RegistrationNotFoundError(registration_id)
    event = await repository.get_event(registration.event_id)
    if event is None:
        raise RegistrationNotFoundError(registration_id)

    context = {
        **build_event_context(event),
        "name": registration.name,
        "email": registration.email,
        "phone": registration.phone or "not provided",
    }

    result = {"email": False, "operators": 0}
    if registration.status != RegistrationStatus.cancelled:
        email_result = await asyncio.to_thread(
            send_email,
            registration.email,
            get_message("registration_confirmed", "email_subject", context),
            get_message("registration_confirmed", "email_body", context),
        )
        result["email"] = isinstance(email_result, Ok)
        if not result["email"]:
            logger.warning(
                f"Confirmation email to {registration.email} failed: {email_result.reason}"
            )

    result["operators"] = await notify_operators(
        ChatMessage(
            title=get_message("registration_confirmed", "discord_title", context),
            body=get_message("registration_confirmed", "discord", context),
            color=0x10B981,
        )
    )
    return result
