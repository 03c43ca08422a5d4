"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .enums import registration_status_enum, schedule_kind_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. EVENTS (written by the event admin app, read-only here)
# =====================================================
events = Table(
    "events",
    metadata,
    Column("event_id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("date", Text, nullable=False),  # "YYYY-MM-DD" in the target timezone
    Column("time", Text),  # "14:00"
    Column("end_time", Text),
    Column("location", Text),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
)


# =====================================================
# 2. REGISTRATIONS
# =====================================================
registrations = Table(
    "registrations",
    metadata,
    Column("registration_id", Text, primary_key=True),
    Column(
        "event_id",
        Text,
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False),
    Column("phone", Text),
    Column("status", registration_status_enum, nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_registrations_event_id", "event_id"),
)


# =====================================================
# 3. CHAT_BINDINGS (contact email -> Discord user)
# =====================================================
chat_bindings = Table(
    "chat_bindings",
    metadata,
    Column("email", Text, primary_key=True),  # stored lower-cased
    Column("discord_id", Text, nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
)


# =====================================================
# 4. SCHEDULES
# =====================================================
schedules = Table(
    "schedules",
    metadata,
    Column("schedule_id", Text, primary_key=True),
    Column("event_id", Text, nullable=False),
    Column("event_title", Text),  # denormalized for display
    Column("event_date", Text, nullable=False),
    Column("kind", schedule_kind_enum, nullable=False),
    Column("days_before", Integer),
    Column("days_after", Integer),
    Column("hour", Integer),
    Column("minute", Integer),
    Column("enabled", Boolean, nullable=False, server_default=text("true")),
    Column("fired", Boolean, nullable=False, server_default=text("false")),
    Column("fired_at", TIMESTAMP(timezone=True)),
    Column(
        "created_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    Index("idx_schedules_event_id", "event_id"),
    Index(
        "idx_schedules_pending",
        "created_at",
        postgresql_where=text("enabled AND NOT fired"),
    ),
)
