"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session. They need a migrated PostgreSQL; when none is
reachable the whole directory is skipped.
"""

import socket
import uuid
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import make_url

from config.settings import settings
from src.main import app


def _database_reachable() -> bool:
    url = make_url(settings.DATABASE_URL)
    try:
        with socket.create_connection((url.host or "localhost", url.port or 5432), timeout=1):
            return True
    except OSError:
        return False


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if _database_reachable():
        return
    skip = pytest.mark.skip(reason="PostgreSQL not reachable (start it and run alembic upgrade head)")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


def unique_user() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution."""
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"testuser_{uid}",
        "email": f"test_{uid}@example.com",
        "password": "TestPass1",
        "display_name": f"Tester {uid}",
    }


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def login(client: AsyncClient) -> Callable[..., Awaitable[dict[str, str]]]:
    """Register (idempotently) and log in; returns the Authorization header."""

    async def _login(user: dict[str, str] | None = None) -> dict[str, str]:
        user = user or unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": user["username"], "password": user["password"]},
        )
        token = resp.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def new_user() -> Callable[[], dict[str, str]]:
    return unique_user
