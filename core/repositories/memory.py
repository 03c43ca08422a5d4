"""In-process repository used when the database is unreachable at startup."""

from dataclasses import replace
from datetime import datetime

from core.enums import RegistrationStatus
from core.models import ChatBinding, Event, Registration, Schedule, normalize_email

from .base import Repository, check_updatable


class MemoryRepository(Repository):
    """
    Dict-backed store. Nothing survives a restart.

    Records are copied on the way in and out so callers can't mutate
    stored state behind the repository's back.
    """

    backend_name = "memory"

    def __init__(
        self,
        events: list[Event] | None = None,
        registrations: list[Registration] | None = None,
        chat_bindings: list[ChatBinding] | None = None,
        schedules: list[Schedule] | None = None,
    ):
        self._events: dict[str, Event] = {e.id: e for e in events or []}
        self._registrations: list[Registration] = list(registrations or [])
        self._chat_bindings: dict[str, ChatBinding] = {
            normalize_email(b.email): b for b in chat_bindings or []
        }
        self._schedules: dict[str, Schedule] = {}
        for schedule in schedules or []:
            self._schedules[schedule.id] = replace(schedule)

    @classmethod
    def with_demo_data(cls) -> "MemoryRepository":
        """Seed a couple of workshops so the dev server has something to show."""
        return cls(
            events=[
                Event(
                    id="1",
                    title="Intro to AI Image Generation",
                    description="Hands-on Stable Diffusion basics",
                    date="2026-01-15",
                    time="14:00",
                    end_time="17:00",
                    location="Online (Google Meet)",
                ),
                Event(
                    id="2",
                    title="Vibe Coding Bootcamp",
                    description="Programming in natural language",
                    date="2026-01-22",
                    time="09:00",
                    end_time="12:00",
                    location="Xinyi District, Taipei",
                ),
            ],
            registrations=[
                Registration(
                    id="1",
                    event_id="1",
                    name="Ming Wang",
                    email="xiaoming@example.com",
                    phone="0912345678",
                    status=RegistrationStatus.confirmed,
                ),
                Registration(
                    id="2",
                    event_id="1",
                    name="Hua Li",
                    email="xiaohua@example.com",
                    phone="0923456789",
                    status=RegistrationStatus.pending,
                ),
            ],
        )

    # --- schedules ---

    async def get_schedules(
        self,
        enabled: bool | None = None,
        fired: bool | None = None,
        event_id: str | None = None,
    ) -> list[Schedule]:
        matches = [
            s
            for s in self._schedules.values()
            if (enabled is None or s.enabled == enabled)
            and (fired is None or s.fired == fired)
            and (event_id is None or s.event_id == event_id)
        ]
        matches.sort(key=lambda s: (s.created_at, s.id))
        return [replace(s) for s in matches]

    async def get_schedule(self, schedule_id: str) -> Schedule | None:
        schedule = self._schedules.get(schedule_id)
        return replace(schedule) if schedule else None

    async def add_schedule(self, schedule: Schedule) -> Schedule:
        self._schedules[schedule.id] = replace(schedule)
        return replace(schedule)

    async def update_schedule(self, schedule_id: str, **fields) -> Schedule | None:
        check_updatable(fields)
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            return None
        updated = replace(schedule, **fields)
        self._schedules[schedule_id] = updated
        return replace(updated)

    async def delete_schedule(self, schedule_id: str) -> bool:
        return self._schedules.pop(schedule_id, None) is not None

    async def mark_schedule_fired(self, schedule_id: str, fired_at: datetime) -> bool:
        # No await between the check and the write, so this is atomic on one loop
        schedule = self._schedules.get(schedule_id)
        if schedule is None or schedule.fired:
            return False
        self._schedules[schedule_id] = replace(schedule, fired=True, fired_at=fired_at)
        return True

    # --- read-only lookups ---

    async def get_event(self, event_id: str) -> Event | None:
        event = self._events.get(event_id)
        return replace(event) if event else None

    async def get_registration(self, registration_id: str) -> Registration | None:
        for registration in self._registrations:
            if registration.id == registration_id:
                return replace(registration)
        return None

    async def get_registrations(self, event_id: str) -> list[Registration]:
        return [replace(r) for r in self._registrations if r.event_id == event_id]

    async def get_chat_bindings(self, emails: list[str]) -> list[ChatBinding]:
        wanted = {normalize_email(email) for email in emails}
        return [replace(b) for key, b in self._chat_bindings.items() if key in wanted]
