"""
Recipient resolution for schedule dispatches.

Recipients are looked up fresh at dispatch time, so registrations confirmed
or cancelled after the schedule was created are respected.
"""

from core.enums import RegistrationStatus
from core.models import Registration, normalize_email
from core.repositories import get_repository


async def resolve_recipients(event_id: str) -> list[Registration]:
    """
    Confirmed registrations for an event.

    Keeps stored order and drops repeated emails (compared case-insensitively),
    so nobody gets the same notification twice.

    Args:
        event_id: The event to look up

    Returns:
        Registrations with status == confirmed
    """
    registrations = await get_repository().get_registrations(event_id)

    seen: set[str] = set()
    recipients = []
    for registration in registrations:
        if registration.status != RegistrationStatus.confirmed:
            continue
        key = normalize_email(registration.email)
        if not key or key in seen:
            continue
        seen.add(key)
        recipients.append(registration)
    return recipients


async def resolve_chat_bindings(registrations: list[Registration]) -> dict[str, str]:
    """
    Map each recipient's normalized email to a linked Discord user ID.

    Recipients without a binding are simply absent from the result.
    """
    if not registrations:
        return {}

    emails = [r.email for r in registrations]
    bindings = await get_repository().get_chat_bindings(emails)
    return {normalize_email(b.email): b.discord_id for b in bindings}
