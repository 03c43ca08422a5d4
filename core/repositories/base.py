"""Storage interface used by the dispatcher, the poller and the API."""

from abc import ABC, abstractmethod
from datetime import datetime

from core.models import ChatBinding, Event, Registration, Schedule

# Fields an operator may change. fired/fired_at only move through
# mark_schedule_fired so a consumed schedule can never be re-armed.
UPDATABLE_SCHEDULE_FIELDS = frozenset(
    {"enabled", "days_before", "days_after", "hour", "minute", "event_title", "event_date"}
)


class Repository(ABC):
    """Backend-agnostic access to schedules and the read-only event data."""

    backend_name: str = "unknown"

    # --- schedules ---

    @abstractmethod
    async def get_schedules(
        self,
        enabled: bool | None = None,
        fired: bool | None = None,
        event_id: str | None = None,
    ) -> list[Schedule]:
        """Schedules matching every given filter, oldest first."""

    @abstractmethod
    async def get_schedule(self, schedule_id: str) -> Schedule | None: ...

    @abstractmethod
    async def add_schedule(self, schedule: Schedule) -> Schedule: ...

    @abstractmethod
    async def update_schedule(self, schedule_id: str, **fields) -> Schedule | None:
        """Apply operator edits. Returns the updated schedule, or None if missing."""

    @abstractmethod
    async def delete_schedule(self, schedule_id: str) -> bool: ...

    @abstractmethod
    async def mark_schedule_fired(self, schedule_id: str, fired_at: datetime) -> bool:
        """
        Set fired=True only if it is still False.

        Returns False when the schedule is missing or was already fired.
        """

    # --- read-only lookups ---

    @abstractmethod
    async def get_event(self, event_id: str) -> Event | None: ...

    @abstractmethod
    async def get_registration(self, registration_id: str) -> Registration | None: ...

    @abstractmethod
    async def get_registrations(self, event_id: str) -> list[Registration]: ...

    @abstractmethod
    async def get_chat_bindings(self, emails: list[str]) -> list[ChatBinding]:
        """Bindings whose email matches any of `emails`, case-insensitively."""


def check_updatable(fields: dict) -> None:
    unknown = set(fields) - UPDATABLE_SCHEDULE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update schedule fields: {', '.join(sorted(unknown))}")
