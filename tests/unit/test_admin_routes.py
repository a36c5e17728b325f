"""Unit tests for the admin role guard on /admin routes (no DB)."""

from collections.abc import AsyncGenerator, Iterator
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from src.main import app
from src.sb_admin.api import router as admin_router
from src.sb_common.database import get_db_session
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_request.application.schemas import RequestListResponse
from src.sb_workflow.application.schemas import ReportListResponse


async def _fake_db() -> AsyncGenerator[AsyncMock, None]:
    yield AsyncMock()


@pytest.fixture
def as_user() -> Iterator[SimpleNamespace]:
    user = SimpleNamespace(id="u1", is_admin=False)
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_db_session] = _fake_db
    yield user
    app.dependency_overrides.clear()


class TestAdminGuard:
    async def test_non_admin_rejected(self, client: AsyncClient, as_user: SimpleNamespace) -> None:
        resp = await client.post("/api/v1/admin/requests/req-1/disable")
        assert resp.status_code == 403
        assert resp.json()["code"] == 1006

    async def test_admin_lists_disputed(
        self,
        client: AsyncClient,
        as_user: SimpleNamespace,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        as_user.is_admin = True
        listing = AsyncMock(return_value=RequestListResponse(items=[]))
        monkeypatch.setattr(admin_router._workflow, "list_disputed_requests", listing)

        resp = await client.get("/api/v1/admin/requests/disputed")

        assert resp.status_code == 200
        assert resp.json()["data"]["items"] == []
        listing.assert_awaited_once()

    async def test_non_admin_cannot_read_reports(
        self, client: AsyncClient, as_user: SimpleNamespace
    ) -> None:
        resp = await client.get("/api/v1/admin/reports")
        assert resp.status_code == 403

    async def test_admin_lists_reports_by_context(
        self,
        client: AsyncClient,
        as_user: SimpleNamespace,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        as_user.is_admin = True
        listing = AsyncMock(return_value=ReportListResponse(items=[]))
        monkeypatch.setattr(admin_router._reports, "list_reports", listing)

        resp = await client.get(
            "/api/v1/admin/reports", params={"status": "resolved", "context_type": "user"}
        )

        assert resp.status_code == 200
        _db, status, context_type, limit = listing.await_args.args
        assert (status, context_type, limit) == ("resolved", "user", 100)
