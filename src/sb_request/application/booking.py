"""DirectBookingService — a client books a specific photographer without bidding.

Flow mirrors bid acceptance: initiate asks the bridge for a hold of
budget + platform fee and returns a signed handle; confirm (after the client
completed payment) records a Pending request that an admin later approves.

The request id is derived from the payment reference, so confirming the same
handle twice is a no-op that returns the first result.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import RequestStatus
from src.sb_common.errors import (
    AppError,
    NotPermittedError,
    PaymentBridgeError,
    PaymentInitiationError,
    PhotographerUnavailableError,
    ProfileNotFoundError,
    ReconciliationGapError,
)
from src.sb_common.id_generator import derived_id
from src.sb_notification.application.service import NotificationSink
from src.sb_notification.domain import messages
from src.sb_notification.domain.models import NotifierProtocol
from src.sb_payment.application.schemas import FeeBreakdownResponse
from src.sb_payment.domain.bridge import IntentMetadata, PaymentBridgeProtocol
from src.sb_payment.domain.fee import fee_breakdown
from src.sb_payment.domain.handle import BookingHandle, sign_booking_handle, verify_booking_handle
from src.sb_payment.infrastructure.bridge_factory import get_payment_bridge
from src.sb_payment.infrastructure.persistence import EscrowRepository
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.persistence import ProfileRepository
from src.sb_request.application.schemas import (
    BookingResult,
    PaymentInitResponse,
    RequestResponse,
)
from src.sb_request.domain.models import Request
from src.sb_request.domain.repository import RequestRepositoryProtocol
from src.sb_request.infrastructure.persistence import RequestRepository

logger = logging.getLogger(__name__)

BOOKING_ID_PREFIX = "req"


class DirectBookingService:
    def __init__(
        self,
        request_repo: RequestRepositoryProtocol | None = None,
        profile_repo: ProfileRepositoryProtocol | None = None,
        escrow_repo: EscrowRepository | None = None,
        bridge: PaymentBridgeProtocol | None = None,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self._requests: RequestRepositoryProtocol = request_repo or RequestRepository()
        self._profiles: ProfileRepositoryProtocol = profile_repo or ProfileRepository()
        self._escrow = escrow_repo or EscrowRepository()
        self._bridge: PaymentBridgeProtocol = bridge or get_payment_bridge()
        self._notifier: NotifierProtocol = notifier or NotificationSink()

    async def initiate_direct_booking(
        self,
        db: AsyncSession,
        owner_id: str,
        photographer_id: str,
        title: str,
        description: str,
        budget: int,
    ) -> PaymentInitResponse:
        if photographer_id == owner_id:
            raise NotPermittedError("cannot book yourself")
        photographer = await self._profiles.get_profile(db, photographer_id)
        if photographer is None:
            raise ProfileNotFoundError(photographer_id)
        if not photographer.is_accepting_requests:
            raise PhotographerUnavailableError(photographer_id)

        breakdown = fee_breakdown(budget)
        try:
            intent = await self._bridge.create_intent(
                breakdown.total,
                IntentMetadata(
                    purpose="booking",
                    extra={"owner_id": owner_id, "photographer_id": photographer_id},
                ),
            )
        except PaymentBridgeError as e:
            raise PaymentInitiationError(e.message) from e

        handle = sign_booking_handle(
            BookingHandle(
                owner_id=owner_id,
                photographer_id=photographer_id,
                title=title,
                description=description,
                budget=budget,
                payment_ref=intent.payment_id,
            )
        )
        return PaymentInitResponse(
            payment_id=intent.payment_id,
            client_secret=intent.client_secret,
            handle=handle,
            fee=FeeBreakdownResponse.from_breakdown(breakdown),
        )

    async def confirm_direct_booking(
        self, db: AsyncSession, owner_id: str, token: str
    ) -> BookingResult:
        h = verify_booking_handle(token)
        if h.owner_id != owner_id:
            raise NotPermittedError("payment handle belongs to another user")

        request_id = derived_id(BOOKING_ID_PREFIX, h.payment_ref)
        draft = Request(
            id=request_id,
            owner_id=h.owner_id,
            title=h.title,
            description=h.description,
            budget=h.budget,
            status=RequestStatus.PENDING.value,
            booked_photographer_id=h.photographer_id,
        )
        try:
            created = await self._requests.insert_request(db, draft)
            if created is not None:
                await self._escrow.record_pending(
                    db, h.payment_ref, request_id, h.owner_id, h.photographer_id, h.budget
                )
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except Exception as e:
            await db.rollback()
            logger.critical(
                "RECONCILIATION GAP: booking payment %s succeeded but request %s was not recorded: %s",
                h.payment_ref,
                request_id,
                e,
            )
            raise ReconciliationGapError(h.payment_ref, request_id, str(e)) from e

        if created is None:
            existing = await self._requests.get_request(db, request_id)
            if existing is None:
                raise ReconciliationGapError(h.payment_ref, request_id, "booking row missing")
            logger.info("Direct booking idempotency hit: payment=%s", h.payment_ref)
            return BookingResult(
                request=RequestResponse.from_domain(existing),
                payment_ref=h.payment_ref,
                idempotent_hit=True,
            )

        logger.info(
            "Direct booking recorded: request=%s photographer=%s budget=%d",
            request_id,
            h.photographer_id,
            h.budget,
        )
        await self._notifier.send(
            h.photographer_id, messages.direct_booking_request(request_id, h.title)
        )
        return BookingResult(request=RequestResponse.from_domain(created), payment_ref=h.payment_ref)
