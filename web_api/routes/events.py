"""
Event notification API routes.

Endpoints:
- POST /api/events/{event_id}/copy - Generate promotional copy with the provider chain
- POST /api/registrations/{registration_id}/confirmation - (Re)send a registration confirmation
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.notifications.actions import (
    RegistrationNotFoundError,
    notify_registration_confirmed,
)
from core.notifications.content import generate_event_copy
from core.repositories import get_repository
from web_api.auth import require_operator

router = APIRouter(prefix="/api", tags=["events"])


class EventCopyRequest(BaseModel):
    """Request body for copy generation."""

    style: str = "lively social media"


@router.post("/events/{event_id}/copy")
async def generate_copy_endpoint(
    event_id: str,
    request: EventCopyRequest,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """
    Generate promotional copy for an event.

    Returns {"text", "provider"}; both are null when no provider is available.
    """
    event = await get_repository().get_event(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")

    return await generate_event_copy(event, request.style)


@router.post("/registrations/{registration_id}/confirmation")
async def send_confirmation_endpoint(
    registration_id: str,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """Send the confirmation email to the registrant and alert operators."""
    try:
        return await notify_registration_confirmed(registration_id)
    except RegistrationNotFoundError:
        raise HTTPException(status_code=404, detail="Registration not found")
