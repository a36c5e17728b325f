"""PayoutService — photographers withdraw their platform balance.

request_payout snapshots the balance into a pending payout request; it does
not debit. The debit happens when an admin completes the payout: the bridge
transfer runs first, then one transaction flips pending -> completed and
debits the balance (guarded, never below zero). A local failure after the
transfer is a reconciliation gap.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.errors import (
    AppError,
    InsufficientBalanceError,
    NothingToPayoutError,
    PayoutAccountMissingError,
    PayoutNotFoundError,
    PayoutNotPendingError,
    PendingPayoutExistsError,
    ProfileNotFoundError,
    ReconciliationGapError,
)
from src.sb_common.id_generator import generate_id
from src.sb_notification.application.service import NotificationSink
from src.sb_notification.domain import messages
from src.sb_notification.domain.models import NotifierProtocol
from src.sb_payment.domain.bridge import PaymentBridgeProtocol
from src.sb_payment.infrastructure.bridge_factory import get_payment_bridge
from src.sb_payout.application.schemas import PayoutListResponse, PayoutResponse
from src.sb_payout.domain.repository import PayoutRepositoryProtocol
from src.sb_payout.infrastructure.persistence import PayoutRepository
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.persistence import ProfileRepository

logger = logging.getLogger(__name__)


class PayoutService:
    def __init__(
        self,
        payout_repo: PayoutRepositoryProtocol | None = None,
        profile_repo: ProfileRepositoryProtocol | None = None,
        bridge: PaymentBridgeProtocol | None = None,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self._payouts: PayoutRepositoryProtocol = payout_repo or PayoutRepository()
        self._profiles: ProfileRepositoryProtocol = profile_repo or ProfileRepository()
        self._bridge: PaymentBridgeProtocol = bridge or get_payment_bridge()
        self._notifier: NotifierProtocol = notifier or NotificationSink()

    async def request_payout(self, db: AsyncSession, user_id: str) -> PayoutResponse:
        profile = await self._profiles.get_profile(db, user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        if profile.balance <= 0:
            raise NothingToPayoutError()
        if await self._payouts.find_pending_for_user(db, user_id) is not None:
            raise PendingPayoutExistsError()

        try:
            payout = await self._payouts.insert_payout(db, generate_id(), user_id, profile.balance)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Payout requested: payout=%s user=%s amount=%d", payout.id, user_id, payout.amount)
        return PayoutResponse.from_domain(payout)

    async def list_my_payouts(self, db: AsyncSession, user_id: str) -> PayoutListResponse:
        rows = await self._payouts.list_for_user(db, user_id)
        return PayoutListResponse(items=[PayoutResponse.from_domain(p) for p in rows])

    async def list_pending_payouts(self, db: AsyncSession) -> PayoutListResponse:
        rows = await self._payouts.list_pending(db)
        return PayoutListResponse(items=[PayoutResponse.from_domain(p) for p in rows])

    async def complete_payout(
        self, db: AsyncSession, admin_id: str, payout_id: str
    ) -> PayoutResponse:
        payout = await self._payouts.get_payout(db, payout_id)
        if payout is None:
            raise PayoutNotFoundError(payout_id)
        if not payout.is_pending:
            raise PayoutNotPendingError(payout_id, payout.status)

        profile = await self._profiles.get_profile(db, payout.user_id)
        if profile is None:
            raise ProfileNotFoundError(payout.user_id)
        if not profile.payout_account_id:
            raise PayoutAccountMissingError(payout.user_id)
        if profile.balance < payout.amount:
            raise InsufficientBalanceError(required=payout.amount, available=profile.balance)

        transfer = await self._bridge.create_transfer(payout.amount, profile.payout_account_id)

        try:
            completed = await self._payouts.mark_completed(db, payout_id, transfer.transfer_id)
            if completed is None:
                raise PayoutNotPendingError(payout_id, "completed")
            await self._profiles.debit_balance(db, payout.user_id, payout.amount)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.critical(
                "RECONCILIATION GAP: transfer %s for payout %s sent but not recorded: %s",
                transfer.transfer_id,
                payout_id,
                e.message if isinstance(e, AppError) else repr(e),
            )
            raise ReconciliationGapError(transfer.transfer_id, payout_id, str(e)) from e

        logger.info(
            "Payout completed: payout=%s user=%s amount=%d transfer=%s admin=%s",
            payout_id,
            payout.user_id,
            payout.amount,
            transfer.transfer_id,
            admin_id,
        )
        await self._notifier.send(
            payout.user_id, messages.payout_completed(payout_id, payout.amount)
        )
        return PayoutResponse.from_domain(completed)
