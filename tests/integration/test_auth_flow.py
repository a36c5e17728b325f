"""Integration tests for auth flow (requires running PG).

Run: pytest tests/integration/test_auth_flow.py -v
Pre-condition: database up and `alembic upgrade head`
"""

from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient

NewUser = Callable[[], dict[str, str]]
Login = Callable[..., Awaitable[dict[str, str]]]

pytestmark = pytest.mark.asyncio(loop_scope="session")


class TestRegister:
    async def test_register_success(self, client: AsyncClient, new_user: NewUser) -> None:
        user = new_user()
        resp = await client.post("/api/v1/auth/register", json=user)
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["username"] == user["username"]
        assert body["data"]["display_name"] == user["display_name"]
        assert "request_id" in body

    async def test_register_duplicate_username(self, client: AsyncClient, new_user: NewUser) -> None:
        user = new_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/register", json={**user, "email": "other@example.com"}
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_register_weak_password(self, client: AsyncClient, new_user: NewUser) -> None:
        resp = await client.post(
            "/api/v1/auth/register", json={**new_user(), "password": "weak"}
        )
        assert resp.status_code == 422


class TestLogin:
    async def test_login_wrong_password(self, client: AsyncClient, new_user: NewUser) -> None:
        user = new_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": user["username"], "password": "WrongPass1"},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    async def test_me_returns_identity(
        self, client: AsyncClient, new_user: NewUser, login: Login
    ) -> None:
        user = new_user()
        headers = await login(user)
        resp = await client.get("/api/v1/auth/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["email"] == user["email"]

    async def test_new_profile_starts_empty(self, client: AsyncClient, login: Login) -> None:
        headers = await login()
        resp = await client.get("/api/v1/profile/me", headers=headers)
        data = resp.json()["data"]
        assert data["balance_cents"] == 0
        assert data["pending_review_count"] == 0
        assert data["is_accepting_requests"] is True


class TestRefresh:
    async def test_refresh_with_access_token_fails(self, client: AsyncClient, new_user: NewUser) -> None:
        user = new_user()
        await client.post("/api/v1/auth/register", json=user)
        login_resp = await client.post(
            "/api/v1/auth/login",
            json={"username": user["username"], "password": user["password"]},
        )
        access_token = login_resp.json()["data"]["access_token"]

        resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})
        assert resp.status_code == 401
        assert resp.json()["code"] == 1005
