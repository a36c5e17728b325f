"""ProfileApplicationService — profile reads and the caller's own settings.

Balance and counter primitives are not exposed here; the workflow services
call the repository directly inside their own transactions.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.cents import cents_to_display
from src.sb_common.errors import ProfileNotFoundError
from src.sb_payment.application.schemas import EscrowPaymentItem
from src.sb_payment.domain.bridge import PaymentBridgeProtocol
from src.sb_payment.infrastructure.persistence import EscrowRepository
from src.sb_profile.application.schemas import (
    BalanceResponse,
    EscrowHistoryResponse,
    OnboardingResponse,
    PhotographerCardItem,
    PhotographerListResponse,
    ProfileResponse,
)
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.persistence import ProfileRepository


class ProfileApplicationService:
    def __init__(
        self,
        repo: ProfileRepositoryProtocol | None = None,
        escrow_repo: EscrowRepository | None = None,
    ) -> None:
        self._repo: ProfileRepositoryProtocol = repo or ProfileRepository()
        self._escrow_repo = escrow_repo or EscrowRepository()

    async def get_profile(self, db: AsyncSession, user_id: str) -> ProfileResponse:
        profile = await self._repo.get_profile(db, user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return ProfileResponse.from_domain(profile)

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        profile = await self._repo.get_profile(db, user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return BalanceResponse(
            user_id=user_id,
            balance_cents=profile.balance,
            balance_display=cents_to_display(profile.balance),
        )

    async def set_accepting_requests(
        self, db: AsyncSession, user_id: str, accepting: bool
    ) -> ProfileResponse:
        try:
            profile = await self._repo.set_accepting_requests(db, user_id, accepting)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProfileResponse.from_domain(profile)

    async def reset_unread_gigs(self, db: AsyncSession, user_id: str) -> None:
        try:
            await self._repo.reset_unread_gigs(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def start_payout_onboarding(
        self, bridge: PaymentBridgeProtocol, user_id: str, email: str
    ) -> OnboardingResponse:
        """Create the connected account and return the onboarding link.

        The account id is saved only once onboarding returns (save_payout_account).
        """
        result = await bridge.create_connect_account(user_id, email)
        return OnboardingResponse(url=result.url, account_id=result.account_id)

    async def save_payout_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> ProfileResponse:
        try:
            profile = await self._repo.save_payout_account(db, user_id, account_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProfileResponse.from_domain(profile)

    async def list_escrow_payments(
        self, db: AsyncSession, user_id: str, limit: int = 100
    ) -> EscrowHistoryResponse:
        payments = await self._escrow_repo.list_for_payee(db, user_id, limit)
        return EscrowHistoryResponse(items=[EscrowPaymentItem.from_domain(p) for p in payments])

    async def list_photographers(
        self,
        db: AsyncSession,
        accepting_only: bool = True,
        query: str | None = None,
        min_rating: float | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> PhotographerListResponse:
        # One extra row tells whether another page exists
        cards = await self._repo.list_photographers(
            db, accepting_only, query, min_rating, limit + 1, offset
        )
        return PhotographerListResponse(
            items=[PhotographerCardItem.from_domain(c) for c in cards[:limit]],
            has_more=len(cards) > limit,
        )
