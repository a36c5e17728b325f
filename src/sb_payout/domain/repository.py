"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_payout.domain.models import PayoutRequest


class PayoutRepositoryProtocol(Protocol):
    async def insert_payout(
        self, db: AsyncSession, payout_id: str, user_id: str, amount: int
    ) -> PayoutRequest: ...

    async def get_payout(self, db: AsyncSession, payout_id: str) -> PayoutRequest | None: ...

    async def find_pending_for_user(
        self, db: AsyncSession, user_id: str
    ) -> PayoutRequest | None: ...

    async def mark_completed(
        self, db: AsyncSession, payout_id: str, transfer_id: str
    ) -> PayoutRequest | None: ...

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[PayoutRequest]: ...

    async def list_pending(self, db: AsyncSession) -> list[PayoutRequest]: ...
