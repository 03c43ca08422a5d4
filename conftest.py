"""Root pytest configuration."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from core.enums import RegistrationStatus
from core.models import ChatBinding, Event, Registration
from core.repositories import MemoryRepository, set_repository

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest.fixture
def workshop_event():
    return Event(
        id="evt-1",
        title="Intro to AI Image Generation",
        date="2026-01-15",
        time="14:00",
        end_time="17:00",
        location="Online (Google Meet)",
        description="Hands-on Stable Diffusion basics",
    )


@pytest.fixture
def repository(workshop_event):
    """
    In-memory repository installed as the active backend.

    One event with three confirmed registrations, one pending and one
    cancelled. Only bob has a linked Discord account.
    """
    repo = MemoryRepository(
        events=[workshop_event],
        registrations=[
            Registration(
                id="r1",
                event_id="evt-1",
                name="Alice",
                email="alice@example.com",
                status=RegistrationStatus.confirmed,
            ),
            Registration(
                id="r2",
                event_id="evt-1",
                name="Bob",
                email="bob@example.com",
                status=RegistrationStatus.confirmed,
            ),
            Registration(
                id="r3",
                event_id="evt-1",
                name="Carol",
                email="carol@example.com",
                status=RegistrationStatus.confirmed,
            ),
            Registration(
                id="r4",
                event_id="evt-1",
                name="Dan",
                email="dan@example.com",
                status=RegistrationStatus.pending,
            ),
            Registration(
                id="r5",
                event_id="evt-1",
                name="Erin",
                email="erin@example.com",
                status=RegistrationStatus.cancelled,
            ),
        ],
        chat_bindings=[ChatBinding(email="Bob@Example.com", discord_id="111")],
    )
    set_repository(repo)
    yield repo
    set_repository(None)
