"""Fixtures for notification tests: a pending schedule and mocked channels."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from core.enums import ScheduleKind
from core.models import Schedule
from core.notifications.content import GeneratedContent
from core.notifications.results import Ok


@pytest_asyncio.fixture
async def schedule(repository):
    return await repository.add_schedule(
        Schedule(
            id="sch-1",
            event_id="evt-1",
            event_title="Intro to AI Image Generation",
            event_date="2026-01-15",
            kind=ScheduleKind.reminder,
            days_before=1,
            hour=9,
            minute=0,
        )
    )


@pytest.fixture
def channels():
    """
    Patch both delivery channels, the email pacing and the operator list.

    Every send succeeds unless a test reconfigures the mocks.
    """
    send_email = MagicMock(return_value=Ok())
    send_dm = AsyncMock(return_value=Ok("msg-1"))
    pause = AsyncMock()

    with (
        patch("core.notifications.dispatcher.send_email", send_email),
        patch("core.notifications.dispatcher.send_discord_dm", send_dm),
        patch("core.notifications.dispatcher._pause_between_emails", pause),
        patch(
            "core.notifications.dispatcher.get_operator_discord_ids",
            return_value=[],
        ) as operators,
    ):
        yield SimpleNamespace(
            send_email=send_email, send_dm=send_dm, pause=pause, operators=operators
        )


def _make_chain(text: str | None = "Generated body", provider: str = "OpenAI"):
    """A stand-in provider chain returning fixed content (or nothing)."""
    chain = MagicMock()
    if text is None:
        chain.generate = AsyncMock(return_value=None)
    else:
        chain.generate = AsyncMock(
            return_value=GeneratedContent(text=text, provider=provider)
        )
    return chain


@pytest.fixture
def make_chain():
    return _make_chain


@pytest.fixture
def chain():
    return _make_chain()
