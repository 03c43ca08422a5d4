"""Tests for message templates."""

import pytest

from core.enums import ScheduleKind
from core.models import Event
from core.notifications.templates import (
    build_event_context,
    get_kind_label,
    get_message,
    load_templates,
    render_message,
)


def test_load_templates_returns_dict():
    templates = load_templates()
    assert isinstance(templates, dict)
    assert "schedule_notification" in templates
    assert "registration_confirmed" in templates


def test_every_kind_has_label_and_guidance():
    templates = load_templates()
    for kind in ScheduleKind:
        assert kind.value in templates["kind_labels"]
        assert kind.value in templates["kind_guidance"]


def test_render_message_substitutes_variables():
    assert render_message("Hello {name}!", {"name": "Alice"}) == "Hello Alice!"


def test_render_message_raises_on_missing_variable():
    with pytest.raises(KeyError):
        render_message("Hello {name}!", {})


def test_get_kind_label():
    assert get_kind_label(ScheduleKind.feedback) == "Feedback request"


def test_event_context_fills_missing_details():
    event = Event(id="e", title="Meetup", date="2026-02-01")

    context = build_event_context(event)

    assert context["time_range"] == "TBA"
    assert context["location"] == "TBA"
    assert "kind_label" not in context


def test_event_context_with_kind(workshop_event):
    context = build_event_context(workshop_event, ScheduleKind.material)

    assert context["time_range"] == "14:00 - 17:00"
    assert context["kind_label"] == "Pre-event materials"


def test_schedule_subject(workshop_event):
    subject = get_message(
        "schedule_notification",
        "email_subject",
        build_event_context(workshop_event, ScheduleKind.reminder),
    )
    assert subject == "[Event reminder] Intro to AI Image Generation"
