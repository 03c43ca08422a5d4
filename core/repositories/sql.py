"""PostgreSQL repository built on SQLAlchemy Core."""

from datetime import datetime

from sqlalchemy import and_, delete, func, insert, select, update

from core.database import get_connection, get_transaction
from core.enums import RegistrationStatus, ScheduleKind
from core.models import ChatBinding, Event, Registration, Schedule, normalize_email
from core.tables import chat_bindings, events, registrations, schedules

from .base import Repository, check_updatable


def _schedule_from_row(row) -> Schedule:
    return Schedule(
        id=row["schedule_id"],
        event_id=row["event_id"],
        event_title=row["event_title"] or "",
        event_date=row["event_date"],
        kind=ScheduleKind(row["kind"]),
        days_before=row["days_before"],
        days_after=row["days_after"],
        hour=row["hour"],
        minute=row["minute"],
        enabled=row["enabled"],
        fired=row["fired"],
        fired_at=row["fired_at"],
        created_at=row["created_at"],
    )


def _event_from_row(row) -> Event:
    return Event(
        id=row["event_id"],
        title=row["title"],
        date=row["date"],
        time=row["time"] or "",
        end_time=row["end_time"] or "",
        location=row["location"] or "",
        description=row["description"] or "",
    )


def _registration_from_row(row) -> Registration:
    return Registration(
        id=row["registration_id"],
        event_id=row["event_id"],
        name=row["name"],
        email=row["email"],
        phone=row["phone"] or "",
        status=RegistrationStatus(row["status"]),
    )


class SqlRepository(Repository):
    """Durable store. Every call opens its own pooled connection."""

    backend_name = "postgres"

    # --- schedules ---

    async def get_schedules(
        self,
        enabled: bool | None = None,
        fired: bool | None = None,
        event_id: str | None = None,
    ) -> list[Schedule]:
        conditions = []
        if enabled is not None:
            conditions.append(schedules.c.enabled == enabled)
        if fired is not None:
            conditions.append(schedules.c.fired == fired)
        if event_id is not None:
            conditions.append(schedules.c.event_id == event_id)

        query = select(schedules).order_by(
            schedules.c.created_at, schedules.c.schedule_id
        )
        if conditions:
            query = query.where(and_(*conditions))

        async with get_connection() as conn:
            result = await conn.execute(query)
            return [_schedule_from_row(row) for row in result.mappings()]

    async def get_schedule(self, schedule_id: str) -> Schedule | None:
        async with get_connection() as conn:
            result = await conn.execute(
                select(schedules).where(schedules.c.schedule_id == schedule_id)
            )
            row = result.mappings().first()
            return _schedule_from_row(row) if row else None

    async def add_schedule(self, schedule: Schedule) -> Schedule:
        async with get_transaction() as conn:
            await conn.execute(
                insert(schedules).values(
                    schedule_id=schedule.id,
                    event_id=schedule.event_id,
                    event_title=schedule.event_title,
                    event_date=schedule.event_date,
                    kind=schedule.kind,
                    days_before=schedule.days_before,
                    days_after=schedule.days_after,
                    hour=schedule.hour,
                    minute=schedule.minute,
                    enabled=schedule.enabled,
                    fired=schedule.fired,
                    fired_at=schedule.fired_at,
                    created_at=schedule.created_at,
                )
            )
        return schedule

    async def update_schedule(self, schedule_id: str, **fields) -> Schedule | None:
        check_updatable(fields)
        if fields:
            async with get_transaction() as conn:
                await conn.execute(
                    update(schedules)
                    .where(schedules.c.schedule_id == schedule_id)
                    .values(**fields)
                )
        return await self.get_schedule(schedule_id)

    async def delete_schedule(self, schedule_id: str) -> bool:
        async with get_transaction() as conn:
            result = await conn.execute(
                delete(schedules).where(schedules.c.schedule_id == schedule_id)
            )
            return result.rowcount > 0

    async def mark_schedule_fired(self, schedule_id: str, fired_at: datetime) -> bool:
        # Conditional update acts as compare-and-swap on the fired flag
        async with get_transaction() as conn:
            result = await conn.execute(
                update(schedules)
                .where(
                    and_(
                        schedules.c.schedule_id == schedule_id,
                        schedules.c.fired.is_(False),
                    )
                )
                .values(fired=True, fired_at=fired_at)
            )
            return result.rowcount == 1

    # --- read-only lookups ---

    async def get_event(self, event_id: str) -> Event | None:
        async with get_connection() as conn:
            result = await conn.execute(
                select(events).where(events.c.event_id == event_id)
            )
            row = result.mappings().first()
            return _event_from_row(row) if row else None

    async def get_registration(self, registration_id: str) -> Registration | None:
        async with get_connection() as conn:
            result = await conn.execute(
                select(registrations).where(
                    registrations.c.registration_id == registration_id
                )
            )
            row = result.mappings().first()
            return _registration_from_row(row) if row else None

    async def get_registrations(self, event_id: str) -> list[Registration]:
        async with get_connection() as conn:
            result = await conn.execute(
                select(registrations)
                .where(registrations.c.event_id == event_id)
                .order_by(registrations.c.created_at)
            )
            return [_registration_from_row(row) for row in result.mappings()]

    async def get_chat_bindings(self, emails: list[str]) -> list[ChatBinding]:
        if not emails:
            return []
        wanted = [normalize_email(email) for email in emails]
        async with get_connection() as conn:
            result = await conn.execute(
                select(chat_bindings.c.email, chat_bindings.c.discord_id).where(
                    func.lower(func.trim(chat_bindings.c.email)).in_(wanted)
                )
            )
            return [
                ChatBinding(email=row["email"], discord_id=row["discord_id"])
                for row in result.mappings()
            ]
