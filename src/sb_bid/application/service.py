"""BidApplicationService — place, cancel and list bids.

Bid amounts are bounded server-side to 1..BID_MAX_AMOUNT_CENTS. Cancelling a
bid leaves the request's unread-bid counter alone: the badge counts bids
received since the owner last looked, not bids currently active.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sb_bid.application.schemas import BidListResponse, BidResponse
from src.sb_bid.domain.repository import BidRepositoryProtocol
from src.sb_bid.infrastructure.persistence import BidRepository
from src.sb_common.enums import RequestStatus
from src.sb_common.errors import (
    BidAmountOutOfRangeError,
    BidNotActiveError,
    BidNotFoundError,
    DuplicateBidError,
    InvalidTransitionError,
    NotPermittedError,
    RequestNoLongerAvailableError,
    RequestNotFoundError,
    SelfBidError,
)
from src.sb_common.id_generator import generate_id
from src.sb_notification.application.service import NotificationSink
from src.sb_notification.domain import messages
from src.sb_notification.domain.models import NotifierProtocol
from src.sb_request.domain.repository import RequestRepositoryProtocol
from src.sb_request.infrastructure.persistence import RequestRepository

logger = logging.getLogger(__name__)


class BidApplicationService:
    def __init__(
        self,
        bid_repo: BidRepositoryProtocol | None = None,
        request_repo: RequestRepositoryProtocol | None = None,
        notifier: NotifierProtocol | None = None,
        max_amount: int | None = None,
    ) -> None:
        self._bids: BidRepositoryProtocol = bid_repo or BidRepository()
        self._requests: RequestRepositoryProtocol = request_repo or RequestRepository()
        self._notifier: NotifierProtocol = notifier or NotificationSink()
        self._max_amount = max_amount or settings.BID_MAX_AMOUNT_CENTS

    async def place_bid(
        self, db: AsyncSession, user_id: str, request_id: str, amount: int, note: str
    ) -> BidResponse:
        if not 1 <= amount <= self._max_amount:
            raise BidAmountOutOfRangeError(amount, self._max_amount)

        request = await self._requests.get_request(db, request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        if request.is_owner(user_id):
            raise SelfBidError()
        if request.status != RequestStatus.OPEN.value:
            raise InvalidTransitionError(request_id, request.status, "place_bid")
        if await self._bids.find_active_bid(db, request_id, user_id) is not None:
            raise DuplicateBidError(request_id)

        try:
            bid = await self._bids.insert_bid(db, generate_id(), request_id, user_id, amount, note)
            if bid is None:
                # Request left Open between the read above and the guarded insert
                raise RequestNoLongerAvailableError(request_id)
            await self._requests.increment_unread_bids(db, request_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Bid placed: bid=%s request=%s amount=%d", bid.id, request_id, amount)
        await self._notifier.send(
            request.owner_id, messages.bid_received(request_id, request.title, amount)
        )
        return BidResponse.from_domain(bid)

    async def cancel_bid(self, db: AsyncSession, user_id: str, bid_id: str) -> BidResponse:
        bid = await self._bids.get_bid(db, bid_id)
        if bid is None:
            raise BidNotFoundError(bid_id)
        if bid.user_id != user_id:
            raise NotPermittedError("only the bidder can cancel a bid")
        if not bid.is_active:
            raise BidNotActiveError(bid_id, bid.status)

        try:
            cancelled = await self._bids.cancel_bid(db, bid_id, user_id)
            if cancelled is None:
                current = await self._bids.get_bid(db, bid_id)
                raise BidNotActiveError(bid_id, current.status if current else "unknown")
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return BidResponse.from_domain(cancelled)

    async def list_bids(self, db: AsyncSession, request_id: str) -> BidListResponse:
        bids = await self._bids.list_for_request(db, request_id)
        return BidListResponse(items=[BidResponse.from_domain(b) for b in bids])

    async def list_my_bids(self, db: AsyncSession, user_id: str) -> BidListResponse:
        bids = await self._bids.list_for_user(db, user_id)
        return BidListResponse(items=[BidResponse.from_domain(b) for b in bids])

    async def mark_bids_seen(self, db: AsyncSession, user_id: str, request_id: str) -> None:
        request = await self._requests.get_request(db, request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        if not request.is_owner(user_id):
            raise NotPermittedError("only the request owner can clear the bid badge")
        try:
            await self._requests.reset_unread_bids(db, request_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
