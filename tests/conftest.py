"""
Pytest configuration for the NGO portal tests.
Common fixtures: an in-memory database, token payloads and API clients.
"""

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from ngo_portal.core.config_manager import settings
from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.core.side_effects import SideEffectChannel
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.db_tables import UserRole

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def database_manager():
    """Fresh in-memory database with the full schema."""
    manager = DatabaseManager()
    await manager.initialize(TEST_DATABASE_URL)
    await manager.create_schema()
    yield manager
    await manager.close()


@pytest.fixture
def channel():
    """Isolated side-effect channel so tests can inspect failures."""
    return SideEffectChannel()


# ============================================================================
# AUTHENTICATION FIXTURES
# ============================================================================


def make_payload(role: UserRole) -> AuthTokenPayload:
    now = datetime.now(timezone.utc)
    return AuthTokenPayload(
        user_id=uuid4(),
        email=f"{role.value.lower()}@example.org",
        role=role,
        exp=now + timedelta(minutes=15),
        iat=now,
        type="access",
    )


@pytest.fixture
def mock_admin_user():
    return make_payload(UserRole.ADMIN)


@pytest.fixture
def mock_volunteer_user():
    return make_payload(UserRole.VOLUNTEER)


@pytest.fixture
def mock_sponsor_user():
    return make_payload(UserRole.SPONSOR)


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================


@pytest.fixture
def client():
    """
    Test client for the full application.

    Entering the client runs the lifespan: a fresh in-memory database is
    created and the admin account from ADMIN_EMAIL/ADMIN_PASSWORD is seeded.
    """
    from ngo_portal.app import app

    with TestClient(app) as test_client:
        yield test_client


def _login(client: TestClient, email: str, password: str):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def _register(client: TestClient, email: str, user_type: str = "volunteer", **extra):
    body = {
        "firstName": "Jamie",
        "lastName": "Rivers",
        "email": email,
        "password": "correct-horse-battery",
        "userType": user_type,
    }
    body.update(extra)
    return client.post("/api/auth/register", json=body)


@pytest.fixture
def login():
    """Factory fixture: login(client, email, password) -> response."""
    return _login


@pytest.fixture
def register():
    """Factory fixture: register(client, email, user_type="volunteer") -> response."""
    return _register


@pytest.fixture
def admin_client(client):
    """Client logged in as the seeded admin (session cookies set)."""
    response = _login(client, settings.admin_email, settings.admin_password)
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def volunteer_client(client):
    """Client logged in as a freshly registered volunteer."""
    assert _register(client, "volunteer@example.org").status_code == 201
    response = _login(client, "volunteer@example.org", "correct-horse-battery")
    assert response.status_code == 200, response.text
    return client


class FakeWebSocket:
    """Stands in for a Starlette WebSocket in broadcaster tests."""

    def __init__(self, fail_on_send: bool = False):
        self.fail_on_send = fail_on_send
        self.sent = []
        self.closed_with = None

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise RuntimeError("connection reset by peer")
        self.sent.append(json.loads(data))

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code


@pytest.fixture
def fake_websocket():
    """Factory fixture: fake_websocket(fail_on_send=False) -> FakeWebSocket."""
    return FakeWebSocket
