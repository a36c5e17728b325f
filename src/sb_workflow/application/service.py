"""WorkflowService — lifecycle transitions after a request is in progress.

Each operation:
  1. loads the request and checks who may act (owner / hired photographer;
     admin-only operations are gated by the router)
  2. asks the state machine whether the action is allowed from the current
     status (InvalidTransitionError otherwise)
  3. runs every write in one transaction, the status change being a guarded
     UPDATE; a guard miss means someone else moved the request first and
     surfaces as RequestNoLongerAvailableError
  4. commits, then notifies through the non-fatal sink

Funds: approve_delivery and resolve_dispute credit exactly one party by the
payment amount; disable_request refunds the owner only when the prior status
held funds. Balances move through atomic increments only.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import DisputeResolution, EscrowStatus, ReportContext, RequestStatus
from src.sb_common.errors import (
    AlreadyReviewedError,
    InvalidTransitionError,
    MissingPaymentDataError,
    NotPermittedError,
    RequestNoLongerAvailableError,
    RequestNotFoundError,
)
from src.sb_common.id_generator import generate_id, project_room_id, review_id
from src.sb_chat.infrastructure.persistence import ChatRepository
from src.sb_notification.application.service import NotificationSink
from src.sb_notification.domain import messages
from src.sb_notification.domain.models import NotifierProtocol
from src.sb_payment.infrastructure.persistence import EscrowRepository
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.persistence import ProfileRepository
from src.sb_request.application.schemas import RequestListResponse, RequestResponse
from src.sb_request.domain.models import Request
from src.sb_request.domain.repository import RequestRepositoryProtocol
from src.sb_request.infrastructure.persistence import RequestRepository
from src.sb_workflow.application.schemas import (
    ContentDeliveryResponse,
    ReportResponse,
    ReviewResponse,
    TransitionResult,
)
from src.sb_workflow.domain.models import DeliveredFile
from src.sb_workflow.domain.state_machine import (
    RequestAction,
    allowed_from,
    holds_funds,
    next_status,
    target_status,
)
from src.sb_workflow.infrastructure.persistence import WorkflowRecordsRepository

logger = logging.getLogger(__name__)


class WorkflowService:
    def __init__(
        self,
        request_repo: RequestRepositoryProtocol | None = None,
        profile_repo: ProfileRepositoryProtocol | None = None,
        chat_repo: ChatRepository | None = None,
        escrow_repo: EscrowRepository | None = None,
        records_repo: WorkflowRecordsRepository | None = None,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self._requests: RequestRepositoryProtocol = request_repo or RequestRepository()
        self._profiles: ProfileRepositoryProtocol = profile_repo or ProfileRepository()
        self._chat = chat_repo or ChatRepository()
        self._escrow = escrow_repo or EscrowRepository()
        self._records = records_repo or WorkflowRecordsRepository()
        self._notifier: NotifierProtocol = notifier or NotificationSink()

    async def _load(self, db: AsyncSession, request_id: str) -> Request:
        request = await self._requests.get_request(db, request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def approve_booking(
        self, db: AsyncSession, admin_id: str, request_id: str
    ) -> TransitionResult:
        request = await self._load(db, request_id)
        next_status(request.status, RequestAction.APPROVE_BOOKING, request_id)
        if not request.booked_photographer_id:
            raise MissingPaymentDataError(request_id)

        room_id = project_room_id(request_id)
        try:
            updated = await self._requests.approve_booking(
                db,
                request_id,
                room_id,
                allowed_from(RequestAction.APPROVE_BOOKING),
                target_status(RequestAction.APPROVE_BOOKING),
            )
            if updated is None or updated.hired_photographer_id is None:
                raise RequestNoLongerAvailableError(request_id)
            await self._chat.ensure_room(
                db, room_id, updated.owner_id, updated.hired_photographer_id, request_id=request_id
            )
            await self._profiles.increment_unread_gigs(db, updated.hired_photographer_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Booking approved: request=%s photographer=%s admin=%s",
            request_id,
            updated.hired_photographer_id,
            admin_id,
        )
        await self._notifier.send(
            updated.hired_photographer_id,
            messages.job_approved(request_id, updated.title, for_photographer=True),
        )
        await self._notifier.send(
            updated.owner_id,
            messages.job_approved(request_id, updated.title, for_photographer=False),
        )
        return TransitionResult.build(RequestResponse.from_domain(updated))

    async def deliver(
        self,
        db: AsyncSession,
        photographer_id: str,
        request_id: str,
        files: list[DeliveredFile],
    ) -> ContentDeliveryResponse:
        request = await self._load(db, request_id)
        if not request.is_hired(photographer_id):
            raise NotPermittedError("only the hired photographer can deliver content")
        next_status(request.status, RequestAction.DELIVER, request_id)

        try:
            delivery = await self._records.insert_delivery(
                db, generate_id(), request_id, photographer_id, files
            )
            updated = await self._requests.transition(
                db,
                request_id,
                allowed_from(RequestAction.DELIVER),
                target_status(RequestAction.DELIVER),
            )
            if updated is None:
                raise RequestNoLongerAvailableError(request_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Content delivered: request=%s delivery=%s files=%d",
            request_id,
            delivery.id,
            len(files),
        )
        await self._notifier.send(
            request.owner_id, messages.delivery_submitted(request_id, request.title)
        )
        return ContentDeliveryResponse.from_domain(delivery)

    async def approve_delivery(
        self, db: AsyncSession, owner_id: str, request_id: str
    ) -> TransitionResult:
        request = await self._load(db, request_id)
        if not request.is_owner(owner_id):
            raise NotPermittedError("only the request owner can approve a delivery")
        next_status(request.status, RequestAction.APPROVE_DELIVERY, request_id)

        photographer_id = request.hired_photographer_id
        amount = request.payment_amount
        if not photographer_id or not amount:
            raise MissingPaymentDataError(request_id)

        try:
            updated = await self._requests.complete_delivery(
                db,
                request_id,
                allowed_from(RequestAction.APPROVE_DELIVERY),
                target_status(RequestAction.APPROVE_DELIVERY),
            )
            if updated is None:
                raise RequestNoLongerAvailableError(request_id)
            await self._profiles.credit_balance(db, photographer_id, amount)
            await self._profiles.increment_pending_reviews(db, photographer_id)
            await self._escrow.settle_for_request(db, request_id, EscrowStatus.RELEASED)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Delivery approved: request=%s photographer=%s credited=%d",
            request_id,
            photographer_id,
            amount,
        )
        await self._notifier.send(
            photographer_id, messages.delivery_approved(request_id, request.title, amount)
        )
        await self._notifier.send(photographer_id, messages.review_request(request_id))
        return TransitionResult.build(
            RequestResponse.from_domain(updated), credited_user_id=photographer_id, amount=amount
        )

    async def raise_dispute(
        self,
        db: AsyncSession,
        user_id: str,
        request_id: str,
        reason: str,
        details: str,
    ) -> ReportResponse:
        request = await self._load(db, request_id)
        if not (request.is_owner(user_id) or request.is_hired(user_id)):
            raise NotPermittedError("only the owner or the hired photographer can dispute")
        next_status(request.status, RequestAction.RAISE_DISPUTE, request_id)
        counterparty = request.counterparty_of(user_id)

        try:
            report = await self._records.insert_report(
                db,
                generate_id(),
                ReportContext.REQUEST,
                request_id,
                user_id,
                counterparty,
                reason,
                details,
                is_dispute=True,
            )
            updated = await self._requests.transition(
                db,
                request_id,
                allowed_from(RequestAction.RAISE_DISPUTE),
                target_status(RequestAction.RAISE_DISPUTE),
            )
            if updated is None:
                raise RequestNoLongerAvailableError(request_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Dispute raised: request=%s by=%s report=%s", request_id, user_id, report.id)
        if counterparty:
            await self._notifier.send(
                counterparty, messages.project_disputed(request_id, request.title)
            )
        return ReportResponse.from_domain(report)

    async def resolve_dispute(
        self,
        db: AsyncSession,
        admin_id: str,
        request_id: str,
        outcome: DisputeResolution,
    ) -> TransitionResult:
        request = await self._load(db, request_id)
        next_status(request.status, RequestAction.RESOLVE_DISPUTE, request_id)

        amount = request.payment_amount
        if outcome is DisputeResolution.REFUNDED:
            beneficiary = request.owner_id
            escrow_status = EscrowStatus.REFUNDED
        else:
            beneficiary = request.hired_photographer_id
            escrow_status = EscrowStatus.RELEASED
        if not beneficiary or not amount:
            raise MissingPaymentDataError(request_id)

        try:
            updated = await self._requests.resolve_dispute(
                db,
                request_id,
                outcome,
                allowed_from(RequestAction.RESOLVE_DISPUTE),
                target_status(RequestAction.RESOLVE_DISPUTE),
            )
            if updated is None:
                raise RequestNoLongerAvailableError(request_id)
            await self._profiles.credit_balance(db, beneficiary, amount)
            await self._escrow.settle_for_request(db, request_id, escrow_status)
            await self._records.resolve_reports(db, request_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Dispute resolved: request=%s outcome=%s credited=%s amount=%d admin=%s",
            request_id,
            outcome.value,
            beneficiary,
            amount,
            admin_id,
        )
        payload = messages.dispute_resolved(request_id, request.title, outcome)
        await self._notifier.send(request.owner_id, payload)
        if request.hired_photographer_id:
            await self._notifier.send(request.hired_photographer_id, payload)
        return TransitionResult.build(
            RequestResponse.from_domain(updated), credited_user_id=beneficiary, amount=amount
        )

    async def disable_request(
        self, db: AsyncSession, admin_id: str, request_id: str
    ) -> TransitionResult:
        refund = 0
        try:
            # Row lock: the held-funds decision must see the status the UPDATE replaces
            request = await self._requests.get_request_for_update(db, request_id)
            if request is None:
                raise RequestNotFoundError(request_id)
            next_status(request.status, RequestAction.DISABLE, request_id)

            if holds_funds(request.status):
                refund = request.payment_amount or 0
                if not refund:
                    raise MissingPaymentDataError(request_id)

            updated = await self._requests.transition(
                db,
                request_id,
                allowed_from(RequestAction.DISABLE),
                target_status(RequestAction.DISABLE),
            )
            if updated is None:
                raise RequestNoLongerAvailableError(request_id)
            if refund:
                await self._profiles.credit_balance(db, request.owner_id, refund)
                await self._escrow.settle_for_request(db, request_id, EscrowStatus.REFUNDED)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Request disabled: request=%s prior=%s refunded=%d admin=%s",
            request_id,
            request.status,
            refund,
            admin_id,
        )
        await self._notifier.send(
            request.owner_id, messages.project_disabled(request_id, request.title, refund)
        )
        return TransitionResult.build(
            RequestResponse.from_domain(updated),
            credited_user_id=request.owner_id if refund else None,
            amount=refund,
        )

    async def submit_review(
        self,
        db: AsyncSession,
        user_id: str,
        request_id: str,
        rating: int,
        comment: str,
    ) -> ReviewResponse:
        request = await self._load(db, request_id)
        if request.status != RequestStatus.COMPLETED.value:
            raise InvalidTransitionError(request_id, request.status, "submit_review")
        if not (request.is_owner(user_id) or request.is_hired(user_id)):
            raise NotPermittedError("only the owner or the hired photographer can review")
        by_client = request.is_owner(user_id)
        reviewee = request.counterparty_of(user_id)
        if reviewee is None:
            raise MissingPaymentDataError(request_id)
        already = request.client_has_reviewed if by_client else request.photographer_has_reviewed
        if already:
            raise AlreadyReviewedError(request_id)

        try:
            review = await self._records.insert_review(
                db, review_id(request_id, user_id), request_id, user_id, reviewee, rating, comment
            )
            if review is None:
                raise AlreadyReviewedError(request_id)
            if await self._requests.mark_reviewed(db, request_id, by_client) is None:
                raise AlreadyReviewedError(request_id)
            await self._profiles.decrement_pending_reviews(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Review submitted: request=%s reviewer=%s rating=%d", request_id, user_id, rating
        )
        await self._notifier.send(reviewee, messages.review_received(request_id, request.title))
        return ReviewResponse.from_domain(review)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_deliveries(
        self, db: AsyncSession, user_id: str, request_id: str, is_admin: bool = False
    ) -> list[ContentDeliveryResponse]:
        request = await self._load(db, request_id)
        if not (is_admin or request.is_owner(user_id) or request.is_hired(user_id)):
            raise NotPermittedError("deliveries are visible to the project parties only")
        rows = await self._records.list_deliveries(db, request_id)
        return [ContentDeliveryResponse.from_domain(d) for d in rows]

    async def list_reviews_for_user(
        self, db: AsyncSession, user_id: str
    ) -> list[ReviewResponse]:
        rows = await self._records.list_reviews_for_user(db, user_id)
        return [ReviewResponse.from_domain(r) for r in rows]

    async def list_open_disputes(self, db: AsyncSession) -> list[ReportResponse]:
        rows = await self._records.list_open_disputes(db)
        return [ReportResponse.from_domain(r) for r in rows]

    async def list_disputed_requests(self, db: AsyncSession) -> RequestListResponse:
        rows = await self._requests.list_by_status(db, RequestStatus.DISPUTED)
        return RequestListResponse(items=[RequestResponse.from_domain(r) for r in rows])
