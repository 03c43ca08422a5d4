# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

Every test gets a known JWT secret; `client` talks to the app backed by the
in-memory repository from the root conftest, without running the lifespan
(no bot, no scheduler).
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(autouse=True)
def _jwt_secret():
    """Ensure JWT_SECRET is set so tokens can be created and verified."""
    with patch("web_api.auth.JWT_SECRET", "test-secret"):
        yield


@pytest.fixture
def operator_headers():
    from web_api.auth import create_jwt

    return {"Authorization": f"Bearer {create_jwt('op-1', 'Operator')}"}


@pytest.fixture
def client(repository):
    """Create a test client for the FastAPI app."""
    from main import app

    return TestClient(app)
