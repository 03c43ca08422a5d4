"""Tests for schedule fire-time calculation."""

from datetime import datetime, timedelta, timezone

import pytest

from core.enums import ScheduleKind
from core.models import Schedule
from core.notifications.timing import (
    InvalidScheduleError,
    compute_fire_instant,
    is_due,
)


@pytest.fixture(autouse=True)
def _taipei(monkeypatch):
    monkeypatch.setenv("TARGET_TIMEZONE", "Asia/Taipei")


def _schedule(**overrides) -> Schedule:
    fields = {
        "id": "s1",
        "event_id": "1",
        "event_date": "2026-01-15",
        "kind": ScheduleKind.reminder,
        "days_before": 1,
        "hour": 9,
        "minute": 0,
    }
    fields.update(overrides)
    return Schedule(**fields)


class TestComputeFireInstant:
    def test_days_before_at_wall_clock_time_in_target_zone(self):
        fire_at = compute_fire_instant(_schedule())

        assert fire_at.astimezone(timezone.utc) == datetime(
            2026, 1, 14, 1, 0, tzinfo=timezone.utc
        )
        assert fire_at.utcoffset() == timedelta(hours=8)

    def test_feedback_counts_days_after_the_event(self):
        schedule = _schedule(
            kind=ScheduleKind.feedback, days_before=None, days_after=2, hour=10
        )

        fire_at = compute_fire_instant(schedule)

        assert (fire_at.year, fire_at.month, fire_at.day) == (2026, 1, 17)
        assert (fire_at.hour, fire_at.minute) == (10, 0)

    def test_feedback_ignores_days_before(self):
        schedule = _schedule(kind=ScheduleKind.feedback, days_before=5, days_after=1)

        assert compute_fire_instant(schedule).day == 16

    def test_missing_fields_use_defaults(self):
        schedule = _schedule(days_before=None, hour=None, minute=None)

        fire_at = compute_fire_instant(schedule)

        # 1 day before at 09:00
        assert (fire_at.day, fire_at.hour, fire_at.minute) == (14, 9, 0)

    def test_feedback_defaults_to_one_day_after(self):
        schedule = _schedule(kind=ScheduleKind.feedback, days_before=None)

        assert compute_fire_instant(schedule).day == 16

    def test_zero_days_before_fires_on_event_day(self):
        schedule = _schedule(kind=ScheduleKind.start, days_before=0, hour=8)

        fire_at = compute_fire_instant(schedule)

        assert (fire_at.day, fire_at.hour) == (15, 8)

    def test_crosses_month_boundary(self):
        schedule = _schedule(event_date="2026-03-01", days_before=2)

        fire_at = compute_fire_instant(schedule)

        assert (fire_at.month, fire_at.day) == (2, 27)

    def test_independent_of_host_timezone(self, monkeypatch):
        expected = compute_fire_instant(_schedule())

        monkeypatch.setenv("TZ", "America/Los_Angeles")

        assert compute_fire_instant(_schedule()) == expected

    def test_follows_configured_timezone(self, monkeypatch):
        monkeypatch.setenv("TARGET_TIMEZONE", "UTC")

        fire_at = compute_fire_instant(_schedule())

        assert fire_at.astimezone(timezone.utc) == datetime(
            2026, 1, 14, 9, 0, tzinfo=timezone.utc
        )

    def test_unparseable_date_raises(self):
        with pytest.raises(InvalidScheduleError):
            compute_fire_instant(_schedule(event_date="next tuesday"))


class TestIsDue:
    def test_not_due_one_minute_before(self):
        now = datetime(2026, 1, 14, 0, 59, tzinfo=timezone.utc)  # 08:59 in Taipei

        assert is_due(_schedule(), now) is False

    def test_due_just_after_fire_instant(self):
        now = datetime(2026, 1, 14, 1, 0, 1, tzinfo=timezone.utc)  # 09:00:01 in Taipei

        assert is_due(_schedule(), now) is True

    def test_due_exactly_at_fire_instant(self):
        now = datetime(2026, 1, 14, 1, 0, tzinfo=timezone.utc)

        assert is_due(_schedule(), now) is True

    def test_fired_schedule_is_never_due(self):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)

        assert is_due(_schedule(fired=True), now) is False

    def test_disabled_schedule_is_never_due(self):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)

        assert is_due(_schedule(enabled=False), now) is False

    def test_naive_now_is_treated_as_utc(self):
        assert is_due(_schedule(), datetime(2026, 1, 14, 0, 59)) is False
        assert is_due(_schedule(), datetime(2026, 1, 14, 1, 1)) is True

    def test_overdue_schedule_stays_due(self):
        now = datetime(2026, 2, 1, tzinfo=timezone.utc)

        assert is_due(_schedule(), now) is True
