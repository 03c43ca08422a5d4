"""Message template loading and rendering."""

from pathlib import Path

import yaml

from core.enums import ScheduleKind
from core.models import Event


_templates: dict | None = None


def load_templates() -> dict:
    """
    Load message templates from YAML file.

    Caches templates after first load.
    """
    global _templates
    if _templates is not None:
        return _templates

    yaml_path = Path(__file__).parent / "messages.yaml"
    with open(yaml_path, encoding="utf-8") as f:
        _templates = yaml.safe_load(f)

    return _templates


def render_message(template: str, context: dict) -> str:
    """
    Render a message template with context variables.

    Args:
        template: String with {variable} placeholders
        context: Dict of variable names to values

    Returns:
        Rendered string

    Raises:
        KeyError: If a required variable is missing from context
    """
    return template.format(**context)


def get_message(message_type: str, field: str, context: dict) -> str:
    """
    Get and render one field of a message type.

    Args:
        message_type: e.g., "schedule_notification", "registration_confirmed"
        field: e.g., "email_subject", "prompt", "discord"
        context: Variables to substitute

    Returns:
        Rendered message string
    """
    templates = load_templates()
    template = templates[message_type][field]
    return render_message(template, context).strip()


def get_kind_label(kind: ScheduleKind) -> str:
    """Human label for a schedule kind, e.g. "Event reminder"."""
    return load_templates()["kind_labels"][kind.value]


def build_event_context(event: Event, kind: ScheduleKind | None = None) -> dict:
    """Template variables describing an event, plus the kind label if given."""
    context = {
        "title": event.title,
        "date": event.date,
        "time_range": event.time_range or "TBA",
        "location": event.location or "TBA",
        "description": event.description,
    }
    if kind is not None:
        context["kind_label"] = get_kind_label(kind)
        context["guidance"] = load_templates()["kind_guidance"][kind.value]
    return context
