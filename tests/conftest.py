"""Shared pytest fixtures for the crypto dashboard tests."""

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from crypto_dashboard.container import init_container
from crypto_dashboard.db.sessions import init_db
from crypto_dashboard.main import create_app
from crypto_dashboard.session import AuthSession
from crypto_dashboard.stores.local import MemoryStorage


# ============================================================================
# Server fixtures
# ============================================================================

@pytest.fixture
def container(tmp_path):
    """Wired container backed by a throwaway SQLite file."""
    container = init_container(f"sqlite:///{tmp_path / 'dashboard.db'}")
    init_db(container.engine())
    yield container
    container.engine().dispose()
    container.unwire()


@pytest.fixture
def app(container):
    return create_app(container)


@pytest.fixture
def api_client(app):
    """Synchronous client for exercising the HTTP routes directly."""
    return TestClient(app)


@pytest_asyncio.fixture
async def http_client(app):
    """Async client routed in-process to the app, as the dashboard uses it."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def _sign_in(container, email: str) -> AuthSession:
    api_session = container.session_repository().issue(email)
    return AuthSession(user_id=api_session.user_id, token=api_session.token)


@pytest.fixture
def auth(container) -> AuthSession:
    return _sign_in(container, "alice@example.com")


@pytest.fixture
def other_auth(container) -> AuthSession:
    return _sign_in(container, "bob@example.com")


@pytest.fixture
def expired_auth(auth) -> AuthSession:
    """A session the server no longer recognises."""
    return AuthSession(user_id=auth.user_id, token="revoked-token")


def bearer(session: AuthSession) -> dict[str, str]:
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def auth_headers(auth):
    return bearer(auth)


@pytest.fixture
def other_headers(other_auth):
    return bearer(other_auth)


# ============================================================================
# Client-side fixtures
# ============================================================================

@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def alert_fields():
    """Factory for valid alert create payloads."""

    def make(**overrides):
        fields = {
            "alert_name": "BTC 100k",
            "coin_id": "bitcoin",
            "coin_name": "Bitcoin",
            "coin_symbol": "BTC",
            "alert_type": "price",
            "condition": "greater_than",
            "threshold_value": "100000",
            "frequency": "once",
        }
        fields.update(overrides)
        return fields

    return make


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
