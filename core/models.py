"""
Domain records shared by the repositories, the dispatcher and the API.

Schedule is owned by this service. Event, Registration and ChatBinding are
written by other tools and only read here.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .enums import RegistrationStatus, ScheduleKind


def new_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


def normalize_email(email: str) -> str:
    """Comparison key for emails: trimmed and lower-cased."""
    return email.strip().lower()


def _parse_timestamp(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Schedule:
    """A declarative notification rule bound to one event."""

    id: str
    event_id: str
    event_date: str  # "YYYY-MM-DD"
    kind: ScheduleKind
    event_title: str = ""
    days_before: int | None = None  # every kind except feedback
    days_after: int | None = None  # feedback only
    hour: int | None = None
    minute: int | None = None
    enabled: bool = True
    fired: bool = False  # terminal once True
    fired_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """JSON shape of a persisted schedule record."""
        return {
            "id": self.id,
            "eventId": self.event_id,
            "eventTitle": self.event_title,
            "eventDate": self.event_date,
            "kind": self.kind.value,
            "daysBefore": self.days_before,
            "daysAfter": self.days_after,
            "hour": self.hour,
            "minute": self.minute,
            "enabled": self.enabled,
            "fired": self.fired,
            "firedAt": _iso(self.fired_at),
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Schedule":
        created_at = _parse_timestamp(data.get("createdAt"))
        return cls(
            id=data.get("id") or new_id(),
            event_id=data["eventId"],
            event_title=data.get("eventTitle") or "",
            event_date=data["eventDate"],
            kind=ScheduleKind(data["kind"]),
            days_before=data.get("daysBefore"),
            days_after=data.get("daysAfter"),
            hour=data.get("hour"),
            minute=data.get("minute"),
            enabled=data.get("enabled", True),
            fired=data.get("fired", False),
            fired_at=_parse_timestamp(data.get("firedAt")),
            created_at=created_at or datetime.now(timezone.utc),
        )


@dataclass
class Event:
    id: str
    title: str
    date: str  # "YYYY-MM-DD"
    time: str = ""
    end_time: str = ""
    location: str = ""
    description: str = ""

    @property
    def time_range(self) -> str:
        """"14:00 - 17:00", or just the start time when there is no end."""
        if self.end_time:
            return f"{self.time} - {self.end_time}"
        return self.time


@dataclass
class Registration:
    id: str
    event_id: str
    name: str
    email: str
    status: RegistrationStatus = RegistrationStatus.pending
    phone: str = ""


@dataclass
class ChatBinding:
    email: str
    discord_id: str
