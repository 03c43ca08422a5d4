"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class ScheduleKind(str, enum.Enum):
    reminder = "reminder"
    start = "start"
    material = "material"
    feedback = "feedback"


class RegistrationStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


# =====================================================
# SQLAlchemy Enum Types
# Stored as VARCHAR so migrations don't need CREATE TYPE
# =====================================================

schedule_kind_enum = SQLEnum(
    ScheduleKind,
    name="schedule_kind",
    native_enum=False,
    values_callable=lambda e: [m.value for m in e],
)
registration_status_enum = SQLEnum(
    RegistrationStatus,
    name="registration_status",
    native_enum=False,
    values_callable=lambda e: [m.value for m in e],
)
