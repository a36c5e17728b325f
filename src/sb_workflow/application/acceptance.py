"""Bid acceptance — turns "accept this bid" into a funded, in-progress project.

Two calls:

1. initiate_acceptance: precondition checks, then the bridge creates a hold for
   bid + fee. Nothing local is written. The caller gets the client secret for
   the payment UI and a signed handle binding the hold to this bid.
2. confirm_acceptance: after the payment UI reports success. One transaction:
     a. guarded UPDATE Open -> In Progress, also requiring the bid to still be
        active (hired photographer, accepted amount, chat room id, zero badge)
     b. project chat room, INSERT ... ON CONFLICT DO NOTHING
     c. photographer unread-gig counter + 1
     d. pending escrow record keyed by the payment reference

If (a) matches no row, either this exact confirmation already landed
(idempotency hit, the existing outcome is returned) or another acceptance or a
bid cancel won the race: the hold is released and the caller gets
RequestNoLongerAvailableError. Any other failure after payment is a
reconciliation gap: money is held with no project; logged CRITICAL and raised
as ReconciliationGapError for manual recovery.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bid.domain.repository import BidRepositoryProtocol
from src.sb_bid.infrastructure.persistence import BidRepository
from src.sb_chat.infrastructure.persistence import ChatRepository
from src.sb_common.errors import (
    AppError,
    BidNotActiveError,
    BidNotFoundError,
    BidRequestMismatchError,
    NotPermittedError,
    PaymentBridgeError,
    PaymentInitiationError,
    ReconciliationGapError,
    RequestNoLongerAvailableError,
    RequestNotFoundError,
)
from src.sb_common.id_generator import project_room_id
from src.sb_notification.application.service import NotificationSink
from src.sb_notification.domain import messages
from src.sb_notification.domain.models import NotifierProtocol
from src.sb_payment.application.schemas import FeeBreakdownResponse
from src.sb_payment.domain.bridge import IntentMetadata, PaymentBridgeProtocol
from src.sb_payment.domain.fee import fee_breakdown
from src.sb_payment.domain.handle import (
    AcceptanceHandle,
    sign_acceptance_handle,
    verify_acceptance_handle,
)
from src.sb_payment.infrastructure.bridge_factory import get_payment_bridge
from src.sb_payment.infrastructure.persistence import EscrowRepository
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.persistence import ProfileRepository
from src.sb_request.application.schemas import PaymentInitResponse, RequestResponse
from src.sb_request.domain.models import Request
from src.sb_request.domain.repository import RequestRepositoryProtocol
from src.sb_request.infrastructure.persistence import RequestRepository
from src.sb_workflow.application.schemas import AcceptanceResult
from src.sb_workflow.domain.state_machine import (
    RequestAction,
    allowed_from,
    next_status,
    target_status,
)

logger = logging.getLogger(__name__)


class AcceptanceService:
    def __init__(
        self,
        request_repo: RequestRepositoryProtocol | None = None,
        bid_repo: BidRepositoryProtocol | None = None,
        profile_repo: ProfileRepositoryProtocol | None = None,
        chat_repo: ChatRepository | None = None,
        escrow_repo: EscrowRepository | None = None,
        bridge: PaymentBridgeProtocol | None = None,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self._requests: RequestRepositoryProtocol = request_repo or RequestRepository()
        self._bids: BidRepositoryProtocol = bid_repo or BidRepository()
        self._profiles: ProfileRepositoryProtocol = profile_repo or ProfileRepository()
        self._chat = chat_repo or ChatRepository()
        self._escrow = escrow_repo or EscrowRepository()
        self._bridge: PaymentBridgeProtocol = bridge or get_payment_bridge()
        self._notifier: NotifierProtocol = notifier or NotificationSink()

    async def initiate_acceptance(
        self, db: AsyncSession, owner_id: str, request_id: str, bid_id: str
    ) -> PaymentInitResponse:
        request = await self._requests.get_request(db, request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        if not request.is_owner(owner_id):
            raise NotPermittedError("only the request owner can accept a bid")
        next_status(request.status, RequestAction.ACCEPT_BID, request_id)

        bid = await self._bids.get_bid(db, bid_id)
        if bid is None:
            raise BidNotFoundError(bid_id)
        if bid.request_id != request_id:
            raise BidRequestMismatchError(bid_id, request_id)
        if not bid.is_active:
            raise BidNotActiveError(bid_id, bid.status)

        breakdown = fee_breakdown(bid.amount)
        try:
            intent = await self._bridge.create_intent(
                breakdown.total,
                IntentMetadata(
                    purpose="acceptance", extra={"request_id": request_id, "bid_id": bid_id}
                ),
            )
        except PaymentBridgeError as e:
            raise PaymentInitiationError(e.message) from e

        handle = sign_acceptance_handle(
            AcceptanceHandle(
                owner_id=owner_id,
                request_id=request_id,
                bid_id=bid_id,
                photographer_id=bid.user_id,
                amount=bid.amount,
                payment_ref=intent.payment_id,
            )
        )
        logger.info(
            "Acceptance initiated: request=%s bid=%s payment=%s total=%d",
            request_id,
            bid_id,
            intent.payment_id,
            breakdown.total,
        )
        return PaymentInitResponse(
            payment_id=intent.payment_id,
            client_secret=intent.client_secret,
            handle=handle,
            fee=FeeBreakdownResponse.from_breakdown(breakdown),
        )

    async def confirm_acceptance(
        self, db: AsyncSession, owner_id: str, token: str
    ) -> AcceptanceResult:
        h = verify_acceptance_handle(token)
        if h.owner_id != owner_id:
            raise NotPermittedError("payment handle belongs to another user")

        room_id = project_room_id(h.request_id)
        try:
            accepted = await self._requests.accept_bid(
                db,
                h.request_id,
                h.bid_id,
                h.photographer_id,
                h.amount,
                room_id,
                allowed_from(RequestAction.ACCEPT_BID),
                target_status(RequestAction.ACCEPT_BID),
            )
            if accepted is None:
                await db.rollback()
            else:
                await self._chat.ensure_room(
                    db, room_id, h.owner_id, h.photographer_id, request_id=h.request_id
                )
                await self._profiles.increment_unread_gigs(db, h.photographer_id)
                await self._escrow.record_pending(
                    db, h.payment_ref, h.request_id, h.owner_id, h.photographer_id, h.amount
                )
                await db.commit()
        except AppError:
            await db.rollback()
            raise
        except Exception as e:
            await db.rollback()
            logger.critical(
                "RECONCILIATION GAP: payment %s succeeded but request %s was not moved to "
                "In Progress: %r",
                h.payment_ref,
                h.request_id,
                e,
            )
            raise ReconciliationGapError(h.payment_ref, h.request_id, str(e)) from e

        if accepted is None:
            return await self._resolve_rejected_confirmation(db, h)

        logger.info(
            "Bid accepted: request=%s bid=%s photographer=%s amount=%d payment=%s",
            h.request_id,
            h.bid_id,
            h.photographer_id,
            h.amount,
            h.payment_ref,
        )
        await self._notify_hired(accepted)
        return AcceptanceResult(
            request=RequestResponse.from_domain(accepted), payment_ref=h.payment_ref
        )

    async def _resolve_rejected_confirmation(
        self, db: AsyncSession, h: AcceptanceHandle
    ) -> AcceptanceResult:
        current = await self._requests.get_request(db, h.request_id)
        if current is None:
            raise RequestNotFoundError(h.request_id)

        if current.is_hired(h.photographer_id) and current.accepted_bid_amount == h.amount:
            escrow = await self._escrow.get_for_request(db, h.request_id)
            if escrow is not None and escrow.id == h.payment_ref:
                logger.info(
                    "Acceptance idempotency hit: request=%s payment=%s",
                    h.request_id,
                    h.payment_ref,
                )
                return AcceptanceResult(
                    request=RequestResponse.from_domain(current),
                    payment_ref=h.payment_ref,
                    idempotent_hit=True,
                )

        try:
            await self._bridge.release_intent(h.payment_ref)
        except AppError as e:
            logger.critical(
                "RECONCILIATION GAP: acceptance of request %s lost the race but hold %s "
                "could not be released: %s",
                h.request_id,
                h.payment_ref,
                e.message,
            )
            raise ReconciliationGapError(
                h.payment_ref, h.request_id, "race lost and hold release failed"
            ) from e

        logger.info(
            "Acceptance race lost: request=%s status=%s payment=%s released",
            h.request_id,
            current.status,
            h.payment_ref,
        )
        raise RequestNoLongerAvailableError(h.request_id)

    async def _notify_hired(self, request: Request) -> None:
        if request.hired_photographer_id:
            await self._notifier.send(
                request.hired_photographer_id, messages.hired(request.id, request.title)
            )
        await self._notifier.send(request.owner_id, messages.gig_hired(request.id, request.title))
