"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bid.domain.models import Bid


class BidRepositoryProtocol(Protocol):
    async def insert_bid(
        self,
        db: AsyncSession,
        bid_id: str,
        request_id: str,
        user_id: str,
        amount: int,
        note: str,
    ) -> Bid | None: ...

    async def get_bid(self, db: AsyncSession, bid_id: str) -> Bid | None: ...

    async def find_active_bid(
        self, db: AsyncSession, request_id: str, user_id: str
    ) -> Bid | None: ...

    async def cancel_bid(self, db: AsyncSession, bid_id: str, user_id: str) -> Bid | None: ...

    async def list_for_request(self, db: AsyncSession, request_id: str) -> list[Bid]: ...

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[Bid]: ...
