"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_profile.domain.models import PhotographerCard, Profile


class ProfileRepositoryProtocol(Protocol):
    async def get_profile(self, db: AsyncSession, user_id: str) -> Profile | None: ...

    async def credit_balance(self, db: AsyncSession, user_id: str, amount: int) -> int: ...

    async def debit_balance(self, db: AsyncSession, user_id: str, amount: int) -> int: ...

    async def increment_unread_gigs(self, db: AsyncSession, user_id: str) -> None: ...

    async def reset_unread_gigs(self, db: AsyncSession, user_id: str) -> None: ...

    async def increment_pending_reviews(self, db: AsyncSession, user_id: str) -> None: ...

    async def decrement_pending_reviews(self, db: AsyncSession, user_id: str) -> None: ...

    async def set_accepting_requests(
        self, db: AsyncSession, user_id: str, accepting: bool
    ) -> Profile: ...

    async def save_payout_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> Profile: ...

    async def list_photographers(
        self,
        db: AsyncSession,
        accepting_only: bool,
        query: str | None,
        min_rating: float | None,
        limit: int,
        offset: int,
    ) -> list[PhotographerCard]: ...
