"""Unit tests for RequestApplicationService, cursor pagination and profile reads."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.sb_common.errors import ProfileNotFoundError, RequestNotFoundError
from src.sb_payment.domain.bridge import ConnectAccountResult
from src.sb_profile.application.service import ProfileApplicationService
from src.sb_profile.domain.models import Profile
from src.sb_request.application.schemas import cursor_decode, cursor_encode
from src.sb_request.application.service import RequestApplicationService
from src.sb_request.domain.models import Request

_BASE = datetime(2025, 3, 1, 12, tzinfo=UTC)


def _request(i: int) -> Request:
    return Request(
        id=f"req-{i}",
        owner_id="owner-1",
        title=f"Shoot {i}",
        description="",
        budget=10000,
        status="Open",
        created_at=_BASE - timedelta(minutes=i),
    )


class TestCursor:
    def test_round_trip(self) -> None:
        assert cursor_decode(cursor_encode(_BASE, "req-1")) == (_BASE, "req-1")

    def test_none_and_garbage(self) -> None:
        assert cursor_decode(None) is None
        assert cursor_decode("%%%not-base64") is None


class TestRequestService:
    async def test_create_starts_open(self) -> None:
        repo = AsyncMock()
        repo.insert_request.side_effect = lambda db, draft: draft
        db = AsyncMock()

        result = await RequestApplicationService(repo).create_request(
            db, "owner-1", "Wedding", "June", 250000
        )

        assert result.status == "Open"
        assert result.budget_display == "$2,500.00"
        assert result.hired_photographer_id is None
        db.commit.assert_awaited_once()

    async def test_get_missing(self) -> None:
        repo = AsyncMock()
        repo.get_request.return_value = None
        with pytest.raises(RequestNotFoundError):
            await RequestApplicationService(repo).get_request(AsyncMock(), "nope")

    async def test_list_open_pages_with_cursor(self) -> None:
        repo = AsyncMock()
        repo.list_open.return_value = [_request(i) for i in range(3)]

        page = await RequestApplicationService(repo).list_open_requests(AsyncMock(), None, 2)

        assert [r.id for r in page.items] == ["req-0", "req-1"]
        assert page.has_more is True
        assert cursor_decode(page.next_cursor) == (_request(1).created_at, "req-1")
        assert repo.list_open.await_args.args[2] == 3

    async def test_last_page(self) -> None:
        repo = AsyncMock()
        repo.list_open.return_value = [_request(0)]

        page = await RequestApplicationService(repo).list_open_requests(AsyncMock(), None, 2)

        assert page.has_more is False
        assert page.next_cursor is None


def _profile() -> Profile:
    return Profile(
        id="u1",
        username="lens",
        display_name="Lens",
        email="lens@example.com",
        role="user",
        balance=123456,
        unread_gigs_count=2,
        pending_review_count=1,
        is_accepting_requests=True,
    )


class TestProfileService:
    async def test_balance_display(self) -> None:
        repo = AsyncMock()
        repo.get_profile.return_value = _profile()

        result = await ProfileApplicationService(repo, AsyncMock()).get_balance(AsyncMock(), "u1")

        assert result.balance_cents == 123456
        assert result.balance_display == "$1,234.56"

    async def test_missing_profile(self) -> None:
        repo = AsyncMock()
        repo.get_profile.return_value = None
        with pytest.raises(ProfileNotFoundError):
            await ProfileApplicationService(repo, AsyncMock()).get_profile(AsyncMock(), "u1")

    async def test_onboarding_does_not_save_account(self) -> None:
        repo = AsyncMock()
        bridge = AsyncMock()
        bridge.create_connect_account.return_value = ConnectAccountResult("https://onboard", "acct_1")

        result = await ProfileApplicationService(repo, AsyncMock()).start_payout_onboarding(
            bridge, "u1", "lens@example.com"
        )

        assert result.account_id == "acct_1"
        repo.save_payout_account.assert_not_awaited()
