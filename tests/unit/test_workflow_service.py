"""Unit tests for WorkflowService: delivery, disputes, disable and reviews."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.sb_common.enums import DisputeResolution, EscrowStatus, NotificationType, RequestStatus
from src.sb_common.errors import (
    AlreadyReviewedError,
    InvalidTransitionError,
    MissingPaymentDataError,
    NotPermittedError,
    RequestNoLongerAvailableError,
)
from src.sb_request.domain.models import Request
from src.sb_workflow.application.service import WorkflowService
from src.sb_workflow.domain.models import ContentDelivery, DeliveredFile, Report, Review

OWNER = "owner-1"
PHOTOG = "photog-1"


def _make_request(**kwargs: Any) -> Request:
    return Request(
        id=kwargs.get("id", "req-1"),
        owner_id=kwargs.get("owner_id", OWNER),
        title=kwargs.get("title", "Product photos"),
        description="",
        budget=kwargs.get("budget", 10000),
        status=kwargs.get("status", "In Progress"),
        hired_photographer_id=kwargs.get("hired_photographer_id", PHOTOG),
        accepted_bid_amount=kwargs.get("accepted_bid_amount", 8000),
        booked_photographer_id=kwargs.get("booked_photographer_id"),
        client_has_reviewed=kwargs.get("client_has_reviewed", False),
        photographer_has_reviewed=kwargs.get("photographer_has_reviewed", False),
    )


def _service() -> tuple[WorkflowService, dict[str, AsyncMock]]:
    mocks = {
        "requests": AsyncMock(),
        "profiles": AsyncMock(),
        "chat": AsyncMock(),
        "escrow": AsyncMock(),
        "records": AsyncMock(),
        "notifier": AsyncMock(),
    }
    svc = WorkflowService(
        request_repo=mocks["requests"],
        profile_repo=mocks["profiles"],
        chat_repo=mocks["chat"],
        escrow_repo=mocks["escrow"],
        records_repo=mocks["records"],
        notifier=mocks["notifier"],
    )
    return svc, mocks


def _sent(notifier: AsyncMock) -> list[tuple[str, NotificationType]]:
    return [(c.args[0], c.args[1].type) for c in notifier.send.await_args_list]


class TestApproveBooking:
    async def test_pending_booking_moves_to_in_progress(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request(
            status="Pending", hired_photographer_id=None, accepted_bid_amount=None,
            booked_photographer_id=PHOTOG,
        )
        m["requests"].approve_booking.return_value = _make_request(
            status="In Progress", accepted_bid_amount=10000, booked_photographer_id=PHOTOG
        )

        result = await svc.approve_booking(db, "admin-1", "req-1")

        assert result.request.status == "In Progress"
        m["chat"].ensure_room.assert_awaited_once_with(
            db, "project:req-1", OWNER, PHOTOG, request_id="req-1"
        )
        m["profiles"].increment_unread_gigs.assert_awaited_once_with(db, PHOTOG)
        db.commit.assert_awaited_once()
        sent = _sent(m["notifier"])
        assert (PHOTOG, NotificationType.JOB_APPROVED) in sent
        assert (OWNER, NotificationType.JOB_APPROVED) in sent

    async def test_open_request_cannot_be_approved(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="Open")
        with pytest.raises(InvalidTransitionError):
            await svc.approve_booking(AsyncMock(), "admin-1", "req-1")


class TestDeliver:
    async def test_hired_photographer_delivers(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        files = [DeliveredFile(url="https://cdn/x.jpg", media_type="image", name="x.jpg")]
        m["requests"].get_request.return_value = _make_request()
        m["records"].insert_delivery.return_value = ContentDelivery(
            id="del-1", request_id="req-1", photographer_id=PHOTOG, files=files
        )
        m["requests"].transition.return_value = _make_request(status="Delivered")

        result = await svc.deliver(db, PHOTOG, "req-1", files)

        assert result.id == "del-1"
        assert result.files[0].url == "https://cdn/x.jpg"
        db.commit.assert_awaited_once()
        assert _sent(m["notifier"]) == [(OWNER, NotificationType.DELIVERY_SUBMITTED)]

    async def test_other_user_cannot_deliver(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        with pytest.raises(NotPermittedError):
            await svc.deliver(AsyncMock(), "stranger", "req-1", [])
        m["records"].insert_delivery.assert_not_awaited()

    async def test_guard_miss_rolls_back(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request()
        m["requests"].transition.return_value = None

        with pytest.raises(RequestNoLongerAvailableError):
            await svc.deliver(db, PHOTOG, "req-1", [])
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestApproveDelivery:
    async def test_credits_photographer_and_releases_escrow(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request(status="Delivered")
        m["requests"].complete_delivery.return_value = _make_request(status="Completed")

        result = await svc.approve_delivery(db, OWNER, "req-1")

        m["profiles"].credit_balance.assert_awaited_once_with(db, PHOTOG, 8000)
        m["profiles"].increment_pending_reviews.assert_awaited_once_with(db, PHOTOG)
        m["escrow"].settle_for_request.assert_awaited_once_with(db, "req-1", EscrowStatus.RELEASED)
        assert result.credited_user_id == PHOTOG
        assert result.credited_amount_cents == 8000
        assert _sent(m["notifier"]) == [
            (PHOTOG, NotificationType.DELIVERY_APPROVED),
            (PHOTOG, NotificationType.REVIEW_REQUEST),
        ]

    async def test_payment_amount_falls_back_to_budget(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request(status="Delivered")
        m["requests"].get_request.return_value.accepted_bid_amount = None
        m["requests"].complete_delivery.return_value = _make_request(status="Completed")

        await svc.approve_delivery(db, OWNER, "req-1")

        m["profiles"].credit_balance.assert_awaited_once_with(db, PHOTOG, 10000)

    async def test_missing_photographer(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(
            status="Delivered", hired_photographer_id=None, accepted_bid_amount=None
        )
        with pytest.raises(MissingPaymentDataError):
            await svc.approve_delivery(AsyncMock(), OWNER, "req-1")
        m["profiles"].credit_balance.assert_not_awaited()

    async def test_only_owner_approves(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="Delivered")
        with pytest.raises(NotPermittedError):
            await svc.approve_delivery(AsyncMock(), PHOTOG, "req-1")

    async def test_second_approval_rejected(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="Completed")
        with pytest.raises(InvalidTransitionError):
            await svc.approve_delivery(AsyncMock(), OWNER, "req-1")
        m["profiles"].credit_balance.assert_not_awaited()


class TestDisputes:
    async def test_owner_disputes_then_admin_refunds(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request(status="Delivered")
        m["records"].insert_report.return_value = Report(
            id="rep-1", request_id="req-1", reporter_id=OWNER, reported_user_id=PHOTOG,
            reason="Blurry", details="", is_dispute=True, status="open",
        )
        m["requests"].transition.return_value = _make_request(status="Disputed")

        report = await svc.raise_dispute(db, OWNER, "req-1", "Blurry", "")

        assert report.is_dispute is True
        m["profiles"].credit_balance.assert_not_awaited()
        assert _sent(m["notifier"]) == [(PHOTOG, NotificationType.PROJECT_DISPUTED)]

        m["notifier"].reset_mock()
        m["requests"].get_request.return_value = _make_request(status="Disputed")
        m["requests"].resolve_dispute.return_value = _make_request(status="Completed")

        result = await svc.resolve_dispute(db, "admin-1", "req-1", DisputeResolution.REFUNDED)

        m["profiles"].credit_balance.assert_awaited_once_with(db, OWNER, 8000)
        m["escrow"].settle_for_request.assert_awaited_once_with(db, "req-1", EscrowStatus.REFUNDED)
        m["records"].resolve_reports.assert_awaited_once_with(db, "req-1")
        assert result.credited_user_id == OWNER
        assert result.request.status == "Completed"
        sent = _sent(m["notifier"])
        assert (OWNER, NotificationType.DISPUTE_RESOLVED) in sent
        assert (PHOTOG, NotificationType.DISPUTE_RESOLVED) in sent

    async def test_paid_outcome_credits_photographer(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request(status="Disputed")
        m["requests"].resolve_dispute.return_value = _make_request(status="Completed")

        await svc.resolve_dispute(db, "admin-1", "req-1", DisputeResolution.PAID)

        m["profiles"].credit_balance.assert_awaited_once_with(db, PHOTOG, 8000)
        m["escrow"].settle_for_request.assert_awaited_once_with(db, "req-1", EscrowStatus.RELEASED)

    async def test_stranger_cannot_dispute(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request()
        with pytest.raises(NotPermittedError):
            await svc.raise_dispute(AsyncMock(), "stranger", "req-1", "x", "")

    async def test_resolve_requires_disputed(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="Delivered")
        with pytest.raises(InvalidTransitionError):
            await svc.resolve_dispute(AsyncMock(), "admin-1", "req-1", DisputeResolution.PAID)


class TestDisableRequest:
    async def test_in_progress_refunds_owner(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request_for_update.return_value = _make_request(status="In Progress")
        m["requests"].transition.return_value = _make_request(status="Disabled")

        result = await svc.disable_request(db, "admin-1", "req-1")

        m["profiles"].credit_balance.assert_awaited_once_with(db, OWNER, 8000)
        m["escrow"].settle_for_request.assert_awaited_once_with(db, "req-1", EscrowStatus.REFUNDED)
        assert result.request.status == RequestStatus.DISABLED.value
        assert result.credited_amount_cents == 8000
        payload = m["notifier"].send.await_args.args[1]
        assert payload.type is NotificationType.PROJECT_DISABLED
        assert "$80.00" in payload.message

    async def test_open_request_disabled_without_refund(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request_for_update.return_value = _make_request(
            status="Open", hired_photographer_id=None, accepted_bid_amount=None
        )
        m["requests"].transition.return_value = _make_request(status="Disabled")

        result = await svc.disable_request(db, "admin-1", "req-1")

        m["profiles"].credit_balance.assert_not_awaited()
        assert result.credited_user_id is None
        assert result.credited_amount_cents == 0

    async def test_completed_request_cannot_be_disabled(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request_for_update.return_value = _make_request(status="Completed")

        with pytest.raises(InvalidTransitionError):
            await svc.disable_request(db, "admin-1", "req-1")
        db.rollback.assert_awaited_once()
        m["profiles"].credit_balance.assert_not_awaited()


class TestSubmitReview:
    def _review(self, reviewer: str, reviewee: str) -> Review:
        return Review(
            id=f"req-1:{reviewer}", request_id="req-1", reviewer_id=reviewer,
            reviewee_id=reviewee, rating=5, comment="Great",
        )

    async def test_client_reviews_photographer(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request(status="Completed")
        m["records"].insert_review.return_value = self._review(OWNER, PHOTOG)
        m["requests"].mark_reviewed.return_value = _make_request(
            status="Completed", client_has_reviewed=True
        )

        result = await svc.submit_review(db, OWNER, "req-1", 5, "Great")

        assert result.reviewee_id == PHOTOG
        args = m["records"].insert_review.await_args.args
        assert args[1] == f"req-1:{OWNER}"
        m["requests"].mark_reviewed.assert_awaited_once_with(db, "req-1", True)
        m["profiles"].decrement_pending_reviews.assert_awaited_once_with(db, OWNER)
        assert _sent(m["notifier"]) == [(PHOTOG, NotificationType.REVIEW_RECEIVED)]

    async def test_flag_already_set(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(
            status="Completed", photographer_has_reviewed=True
        )
        with pytest.raises(AlreadyReviewedError):
            await svc.submit_review(AsyncMock(), PHOTOG, "req-1", 4, "")
        m["records"].insert_review.assert_not_awaited()

    async def test_concurrent_duplicate_insert(self) -> None:
        svc, m = _service()
        db = AsyncMock()
        m["requests"].get_request.return_value = _make_request(status="Completed")
        m["records"].insert_review.return_value = None

        with pytest.raises(AlreadyReviewedError):
            await svc.submit_review(db, PHOTOG, "req-1", 4, "")
        db.rollback.assert_awaited_once()

    async def test_review_requires_completed(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="Delivered")
        with pytest.raises(InvalidTransitionError):
            await svc.submit_review(AsyncMock(), OWNER, "req-1", 5, "")

    async def test_stranger_cannot_review(self) -> None:
        svc, m = _service()
        m["requests"].get_request.return_value = _make_request(status="Completed")
        with pytest.raises(NotPermittedError):
            await svc.submit_review(AsyncMock(), "stranger", "req-1", 5, "")
