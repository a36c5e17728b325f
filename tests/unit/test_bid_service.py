"""Unit tests for BidApplicationService and BidRepository insert mapping."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.sb_bid.application.service import BidApplicationService
from src.sb_bid.domain.models import Bid
from src.sb_bid.infrastructure.persistence import BidRepository
from src.sb_common.enums import NotificationType
from src.sb_common.errors import (
    BidAmountOutOfRangeError,
    BidNotActiveError,
    DuplicateBidError,
    InvalidTransitionError,
    NotPermittedError,
    RequestNoLongerAvailableError,
    SelfBidError,
)
from src.sb_request.domain.models import Request

OWNER = "owner-1"
PHOTOG = "photog-1"


def _make_request(**kwargs: Any) -> Request:
    return Request(
        id="req-1",
        owner_id=OWNER,
        title="Headshots",
        description="",
        budget=10000,
        status=kwargs.get("status", "Open"),
    )


def _make_bid(**kwargs: Any) -> Bid:
    return Bid(
        id="bid-1",
        request_id="req-1",
        user_id=kwargs.get("user_id", PHOTOG),
        request_owner_id=OWNER,
        amount=kwargs.get("amount", 8000),
        note="",
        status=kwargs.get("status", "active"),
    )


def _service() -> tuple[BidApplicationService, dict[str, AsyncMock]]:
    mocks = {"bids": AsyncMock(), "requests": AsyncMock(), "notifier": AsyncMock()}
    svc = BidApplicationService(
        bid_repo=mocks["bids"],
        request_repo=mocks["requests"],
        notifier=mocks["notifier"],
        max_amount=1_000_000,
    )
    return svc, mocks


class TestPlaceBid:
    async def test_places_bid_and_bumps_unread_counter(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].find_active_bid.return_value = None
        m["bids"].insert_bid.return_value = _make_bid()

        result = await svc.place_bid(db, PHOTOG, "req-1", 8000, "")

        assert result.amount_cents == 8000
        assert result.amount_display == "$80.00"
        m["requests"].increment_unread_bids.assert_awaited_once_with(db, "req-1")
        db.commit.assert_awaited_once()
        payload = m["notifier"].send.await_args.args[1]
        assert m["notifier"].send.await_args.args[0] == OWNER
        assert payload.type is NotificationType.BID_RECEIVED

    @pytest.mark.parametrize("amount", [0, -1, 1_000_001])
    async def test_amount_out_of_range(self, amount: int) -> None:
        svc, m = _service()
        with pytest.raises(BidAmountOutOfRangeError):
            await svc.place_bid(AsyncMock(), PHOTOG, "req-1", amount, "")
        m["requests"].get_request.assert_not_awaited()

    @pytest.mark.parametrize("amount", [1, 1_000_000])
    async def test_amount_bounds_inclusive(self, amount: int) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].find_active_bid.return_value = None
        m["bids"].insert_bid.return_value = _make_bid(amount=amount)

        result = await svc.place_bid(AsyncMock(), PHOTOG, "req-1", amount, "")
        assert result.amount_cents == amount

    async def test_owner_cannot_bid(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        with pytest.raises(SelfBidError):
            await svc.place_bid(AsyncMock(), OWNER, "req-1", 5000, "")

    async def test_request_not_open(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="In Progress")
        with pytest.raises(InvalidTransitionError):
            await svc.place_bid(AsyncMock(), PHOTOG, "req-1", 5000, "")

    async def test_second_active_bid_rejected(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].find_active_bid.return_value = _make_bid()
        with pytest.raises(DuplicateBidError) as exc_info:
            await svc.place_bid(AsyncMock(), PHOTOG, "req-1", 5000, "")
        assert exc_info.value.http_status == 409
        m["bids"].insert_bid.assert_not_awaited()

    async def test_request_closed_during_insert(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].find_active_bid.return_value = None
        m["bids"].insert_bid.return_value = None

        with pytest.raises(RequestNoLongerAvailableError):
            await svc.place_bid(db, PHOTOG, "req-1", 5000, "")
        db.rollback.assert_awaited_once()
        m["requests"].increment_unread_bids.assert_not_awaited()
        m["notifier"].send.assert_not_awaited()


class TestCancelBid:
    async def test_cancel_active_bid(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["bids"].get_bid.return_value = _make_bid()
        m["bids"].cancel_bid.return_value = _make_bid(status="cancelled")

        result = await svc.cancel_bid(db, PHOTOG, "bid-1")

        assert result.status == "cancelled"
        db.commit.assert_awaited_once()
        m["requests"].increment_unread_bids.assert_not_awaited()

    async def test_cancel_already_cancelled(self) -> None:
        svc, m = _service()
        m["bids"].get_bid.return_value = _make_bid(status="cancelled")
        with pytest.raises(BidNotActiveError):
            await svc.cancel_bid(AsyncMock(), PHOTOG, "bid-1")
        m["bids"].cancel_bid.assert_not_awaited()

    async def test_cancel_accepted_bid_race(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["bids"].get_bid.side_effect = [_make_bid(), _make_bid(status="accepted")]
        m["bids"].cancel_bid.return_value = None

        with pytest.raises(BidNotActiveError) as exc_info:
            await svc.cancel_bid(db, PHOTOG, "bid-1")
        assert "accepted" in exc_info.value.message
        db.rollback.assert_awaited_once()

    async def test_only_bidder_cancels(self) -> None:
        svc, m = _service()
        m["bids"].get_bid.return_value = _make_bid()
        with pytest.raises(NotPermittedError):
            await svc.cancel_bid(AsyncMock(), "someone-else", "bid-1")


class TestMarkBidsSeen:
    async def test_owner_resets_counter(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request()

        await svc.mark_bids_seen(db, OWNER, "req-1")

        m["requests"].reset_unread_bids.assert_awaited_once_with(db, "req-1")
        db.commit.assert_awaited_once()

    async def test_non_owner_rejected(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        with pytest.raises(NotPermittedError):
            await svc.mark_bids_seen(AsyncMock(), PHOTOG, "req-1")


class TestBidRepositoryInsert:
    async def test_partial_unique_violation_maps_to_duplicate(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(
            side_effect=IntegrityError(
                "INSERT", {}, Exception('violates unique constraint "uq_bids_active_per_user"')
            )
        )
        with pytest.raises(DuplicateBidError):
            await BidRepository().insert_bid(db, "bid-1", "req-1", PHOTOG, 5000, "")

    async def test_other_integrity_errors_propagate(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("violates check constraint"))
        )
        with pytest.raises(IntegrityError):
            await BidRepository().insert_bid(db, "bid-1", "req-1", PHOTOG, 5000, "")

    async def test_guard_miss_returns_none(self) -> None:
        db = MagicMock()
        result = MagicMock()
        result.fetchone.return_value = None
        db.execute = AsyncMock(return_value=result)

        assert await BidRepository().insert_bid(db, "bid-1", "req-1", PHOTOG, 5000, "") is None
