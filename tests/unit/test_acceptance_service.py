"""Unit tests for AcceptanceService: initiate and confirm a bid acceptance."""

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.sb_bid.domain.models import Bid
from src.sb_common.enums import NotificationType
from src.sb_common.errors import (
    BidNotActiveError,
    BidRequestMismatchError,
    InvalidPaymentHandleError,
    InvalidTransitionError,
    NotPermittedError,
    PaymentBridgeError,
    PaymentInitiationError,
    ReconciliationGapError,
    RequestNoLongerAvailableError,
)
from src.sb_payment.domain.bridge import PaymentIntentResult
from src.sb_payment.domain.handle import (
    AcceptanceHandle,
    sign_acceptance_handle,
    verify_acceptance_handle,
)
from src.sb_payment.domain.models import EscrowPayment
from src.sb_request.domain.models import Request
from src.sb_workflow.application.acceptance import AcceptanceService

OWNER = "owner-1"
PHOTOG = "photog-1"


def _make_request(**kwargs: Any) -> Request:
    return Request(
        id=kwargs.get("id", "req-1"),
        owner_id=kwargs.get("owner_id", OWNER),
        title=kwargs.get("title", "Wedding shoot"),
        description=kwargs.get("description", ""),
        budget=kwargs.get("budget", 10000),
        status=kwargs.get("status", "Open"),
        hired_photographer_id=kwargs.get("hired_photographer_id"),
        accepted_bid_amount=kwargs.get("accepted_bid_amount"),
        project_chat_room_id=kwargs.get("project_chat_room_id"),
    )


def _make_bid(**kwargs: Any) -> Bid:
    return Bid(
        id=kwargs.get("id", "bid-1"),
        request_id=kwargs.get("request_id", "req-1"),
        user_id=kwargs.get("user_id", PHOTOG),
        request_owner_id=OWNER,
        amount=kwargs.get("amount", 8000),
        note="",
        status=kwargs.get("status", "active"),
    )


def _handle(**kwargs: Any) -> str:
    return sign_acceptance_handle(
        AcceptanceHandle(
            owner_id=kwargs.get("owner_id", OWNER),
            request_id="req-1",
            bid_id="bid-1",
            photographer_id=PHOTOG,
            amount=8000,
            payment_ref="pi_1",
        )
    )


def _hired_request() -> Request:
    return _make_request(
        status="In Progress",
        hired_photographer_id=PHOTOG,
        accepted_bid_amount=8000,
        project_chat_room_id="project:req-1",
    )


def _service() -> tuple[AcceptanceService, dict[str, AsyncMock]]:
    mocks = {
        "requests": AsyncMock(),
        "bids": AsyncMock(),
        "profiles": AsyncMock(),
        "chat": AsyncMock(),
        "escrow": AsyncMock(),
        "bridge": AsyncMock(),
        "notifier": AsyncMock(),
    }
    svc = AcceptanceService(
        request_repo=mocks["requests"],
        bid_repo=mocks["bids"],
        profile_repo=mocks["profiles"],
        chat_repo=mocks["chat"],
        escrow_repo=mocks["escrow"],
        bridge=mocks["bridge"],
        notifier=mocks["notifier"],
    )
    return svc, mocks


class TestInitiateAcceptance:
    async def test_holds_bid_plus_fee_and_signs_handle(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].get_bid.return_value = _make_bid()
        m["bridge"].create_intent.return_value = PaymentIntentResult("cs_1", "pi_1")

        result = await svc.initiate_acceptance(AsyncMock(), OWNER, "req-1", "bid-1")

        assert m["bridge"].create_intent.await_args.args[0] == 9200
        assert result.client_secret == "cs_1"
        assert result.fee.amount_cents == 8000
        assert result.fee.fee_cents == 1200
        assert result.fee.total_cents == 9200
        handle = verify_acceptance_handle(result.handle)
        assert handle.amount == 8000
        assert handle.photographer_id == PHOTOG
        assert handle.payment_ref == "pi_1"

    async def test_non_owner_rejected_before_payment(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        with pytest.raises(NotPermittedError):
            await svc.initiate_acceptance(AsyncMock(), "someone-else", "req-1", "bid-1")
        m["bridge"].create_intent.assert_not_awaited()

    async def test_request_not_open(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="In Progress")
        with pytest.raises(InvalidTransitionError):
            await svc.initiate_acceptance(AsyncMock(), OWNER, "req-1", "bid-1")

    async def test_bid_from_other_request(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].get_bid.return_value = _make_bid(request_id="req-2")
        with pytest.raises(BidRequestMismatchError):
            await svc.initiate_acceptance(AsyncMock(), OWNER, "req-1", "bid-1")

    async def test_cancelled_bid(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].get_bid.return_value = _make_bid(status="cancelled")
        with pytest.raises(BidNotActiveError):
            await svc.initiate_acceptance(AsyncMock(), OWNER, "req-1", "bid-1")

    async def test_bridge_failure_changes_nothing(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request()
        m["bids"].get_bid.return_value = _make_bid()
        m["bridge"].create_intent.side_effect = PaymentBridgeError("card network down")

        with pytest.raises(PaymentInitiationError):
            await svc.initiate_acceptance(db, OWNER, "req-1", "bid-1")
        m["requests"].accept_bid.assert_not_awaited()
        db.commit.assert_not_awaited()


class TestConfirmAcceptance:
    async def test_happy_path_writes_everything_in_one_commit(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].accept_bid.return_value = _hired_request()

        result = await svc.confirm_acceptance(db, OWNER, _handle())

        args = m["requests"].accept_bid.await_args.args
        assert args[1:6] == ("req-1", "bid-1", PHOTOG, 8000, "project:req-1")
        m["chat"].ensure_room.assert_awaited_once_with(
            db, "project:req-1", OWNER, PHOTOG, request_id="req-1"
        )
        m["profiles"].increment_unread_gigs.assert_awaited_once_with(db, PHOTOG)
        m["escrow"].record_pending.assert_awaited_once_with(
            db, "pi_1", "req-1", OWNER, PHOTOG, 8000
        )
        db.commit.assert_awaited_once()
        assert result.request.status == "In Progress"
        assert result.request.accepted_bid_amount_cents == 8000
        assert result.idempotent_hit is False

        sent = [(c.args[0], c.args[1].type) for c in m["notifier"].send.await_args_list]
        assert (PHOTOG, NotificationType.HIRED) in sent
        assert (OWNER, NotificationType.GIG_HIRED) in sent

    async def test_handle_of_other_user_rejected(self) -> None:
        svc, m = _service()
        with pytest.raises(NotPermittedError):
            await svc.confirm_acceptance(AsyncMock(), "intruder", _handle())
        m["requests"].accept_bid.assert_not_awaited()

    async def test_tampered_handle_rejected(self) -> None:
        svc, _m = _service()
        with pytest.raises(InvalidPaymentHandleError):
            await svc.confirm_acceptance(AsyncMock(), OWNER, _handle() + "x")

    async def test_race_lost_releases_hold(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].accept_bid.return_value = None
        m["requests"].get_request.return_value = _make_request(
            status="In Progress", hired_photographer_id="photog-2", accepted_bid_amount=7000
        )

        with pytest.raises(RequestNoLongerAvailableError) as exc_info:
            await svc.confirm_acceptance(db, OWNER, _handle())

        assert exc_info.value.http_status == 409
        m["bridge"].release_intent.assert_awaited_once_with("pi_1")
        m["escrow"].record_pending.assert_not_awaited()
        db.commit.assert_not_awaited()
        m["notifier"].send.assert_not_awaited()

    async def test_retry_after_success_is_idempotent(self) -> None:
        svc, m = _service()
        m["requests"].accept_bid.return_value = None
        m["requests"].get_request.return_value = _hired_request()
        m["escrow"].get_for_request.return_value = EscrowPayment(
            id="pi_1", request_id="req-1", payer_id=OWNER, payee_id=PHOTOG,
            amount=8000, status="pending",
        )

        result = await svc.confirm_acceptance(AsyncMock(), OWNER, _handle())

        assert result.idempotent_hit is True
        assert result.payment_ref == "pi_1"
        m["bridge"].release_intent.assert_not_awaited()
        m["notifier"].send.assert_not_awaited()

    async def test_write_failure_after_payment_is_reconciliation_gap(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].accept_bid.return_value = _hired_request()
        m["escrow"].record_pending.side_effect = RuntimeError("connection reset")

        with caplog.at_level(logging.CRITICAL):
            with pytest.raises(ReconciliationGapError) as exc_info:
                await svc.confirm_acceptance(db, OWNER, _handle())

        assert exc_info.value.payment_ref == "pi_1"
        assert exc_info.value.request_id == "req-1"
        db.rollback.assert_awaited()
        db.commit.assert_not_awaited()
        assert any("RECONCILIATION GAP" in r.message for r in caplog.records)

    async def test_failed_release_after_race_is_reconciliation_gap(self) -> None:
        svc, m = _service()
        m["requests"].accept_bid.return_value = None
        m["requests"].get_request.return_value = _make_request(status="Disabled")
        m["bridge"].release_intent.side_effect = PaymentBridgeError("timeout")

        with pytest.raises(ReconciliationGapError):
            await svc.confirm_acceptance(AsyncMock(), OWNER, _handle())
