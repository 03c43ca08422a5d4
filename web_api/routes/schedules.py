"""
Schedule management API routes.

All endpoints require operator authentication.

Endpoints:
- POST /run-schedule - Dispatch a schedule now, returns the DispatchResult
- GET /api/schedules - List schedules (optionally for one event)
- POST /api/schedules - Create an ad-hoc schedule
- POST /api/events/{event_id}/schedules/defaults - Create the standard schedule set
- PATCH /api/schedules/{schedule_id} - Edit a pending schedule
- DELETE /api/schedules/{schedule_id} - Delete a schedule
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from core.enums import ScheduleKind
from core.models import Schedule
from core.notifications.actions import (
    EventNotFoundError,
    ScheduleAlreadyFiredError,
    ScheduleNotFoundError,
    create_default_schedules,
    create_schedule,
    edit_schedule,
)
from core.notifications.dispatcher import execute_schedule
from core.notifications.timing import InvalidScheduleError, compute_fire_instant
from core.repositories import get_repository
from web_api.auth import require_operator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["schedules"])


# --- Pydantic models ---


class RunScheduleRequest(BaseModel):
    """Request body for a manual run."""

    scheduleId: str


class CreateScheduleRequest(BaseModel):
    """Request body for an ad-hoc schedule."""

    eventId: str
    kind: ScheduleKind
    daysBefore: int | None = Field(default=None, ge=0)
    daysAfter: int | None = Field(default=None, ge=0)
    hour: int | None = Field(default=None, ge=0, le=23)
    minute: int | None = Field(default=None, ge=0, le=59)
    enabled: bool = True


class UpdateScheduleRequest(BaseModel):
    """Request body for editing a schedule. Omitted fields are left alone."""

    enabled: bool | None = None
    daysBefore: int | None = Field(default=None, ge=0)
    daysAfter: int | None = Field(default=None, ge=0)
    hour: int | None = Field(default=None, ge=0, le=23)
    minute: int | None = Field(default=None, ge=0, le=59)

    @field_validator("enabled", "daysBefore", "daysAfter", "hour", "minute")
    @classmethod
    def reject_null(cls, value):
        # Omitted fields are left alone; an explicit null is refused
        if value is None:
            raise ValueError("must not be null")
        return value


_FIELD_NAMES = {
    "enabled": "enabled",
    "daysBefore": "days_before",
    "daysAfter": "days_after",
    "hour": "hour",
    "minute": "minute",
}


def _schedule_payload(schedule: Schedule) -> dict[str, Any]:
    """Schedule JSON plus its computed fire instant."""
    try:
        fire_at = compute_fire_instant(schedule).isoformat()
    except InvalidScheduleError:
        fire_at = None
    return {**schedule.to_dict(), "fireAt": fire_at}


# --- Routes ---


@router.post("/run-schedule")
async def run_schedule_endpoint(
    request: RunScheduleRequest,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """
    Dispatch a schedule immediately, through the same path as the poller.

    Aborted dispatches (missing event, no recipients, already fired) come back
    as success=false with a reason; the schedule is left untouched.
    """
    schedule = await get_repository().get_schedule(request.scheduleId)
    if schedule is None:
        raise HTTPException(status_code=404, detail="Schedule not found")

    logger.info(f"Operator {operator.get('sub')} triggered schedule {schedule.id}")
    result = await execute_schedule(schedule.id)
    return result.to_dict()


@router.get("/api/schedules")
async def list_schedules_endpoint(
    eventId: str | None = None,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """List schedules in stored order."""
    schedules = await get_repository().get_schedules(event_id=eventId)
    return {"schedules": [_schedule_payload(s) for s in schedules]}


@router.post("/api/schedules", status_code=201)
async def create_schedule_endpoint(
    request: CreateScheduleRequest,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """Create an ad-hoc schedule."""
    try:
        schedule = await create_schedule(
            event_id=request.eventId,
            kind=request.kind,
            days_before=request.daysBefore,
            days_after=request.daysAfter,
            hour=request.hour,
            minute=request.minute,
            enabled=request.enabled,
        )
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")

    return {"schedule": _schedule_payload(schedule)}


@router.post("/api/events/{event_id}/schedules/defaults", status_code=201)
async def create_default_schedules_endpoint(
    event_id: str,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """Create the standard schedule set, skipping kinds the event already has."""
    try:
        created = await create_default_schedules(event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")

    return {"schedules": [_schedule_payload(s) for s in created]}


@router.patch("/api/schedules/{schedule_id}")
async def update_schedule_endpoint(
    schedule_id: str,
    request: UpdateScheduleRequest,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """Edit a pending schedule. Fired schedules are read-only."""
    fields = {
        _FIELD_NAMES[key]: value
        for key, value in request.model_dump(exclude_unset=True).items()
    }
    try:
        schedule = await edit_schedule(schedule_id, **fields)
    except ScheduleNotFoundError:
        raise HTTPException(status_code=404, detail="Schedule not found")
    except ScheduleAlreadyFiredError:
        raise HTTPException(status_code=409, detail="Schedule has already fired")

    return {"schedule": _schedule_payload(schedule)}


@router.delete("/api/schedules/{schedule_id}")
async def delete_schedule_endpoint(
    schedule_id: str,
    operator: dict = Depends(require_operator),
) -> dict[str, Any]:
    """Delete a schedule."""
    deleted = await get_repository().delete_schedule(schedule_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return {"deleted": True}
