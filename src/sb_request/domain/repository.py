"""Repository Protocol — dependency inversion for testability.

Every status-changing method is a guarded write: it takes the set of statuses
the change is allowed from and returns None when the row was no longer in one
of them (race loss or stale caller).
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import DisputeResolution, RequestStatus
from src.sb_request.domain.models import Request


class RequestRepositoryProtocol(Protocol):
    async def insert_request(self, db: AsyncSession, request: Request) -> Request | None: ...

    async def get_request(self, db: AsyncSession, request_id: str) -> Request | None: ...

    async def get_request_for_update(
        self, db: AsyncSession, request_id: str
    ) -> Request | None: ...

    async def list_open(
        self,
        db: AsyncSession,
        cursor: tuple[datetime, str] | None,
        limit: int,
    ) -> list[Request]: ...

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[Request]: ...

    async def list_by_photographer(self, db: AsyncSession, user_id: str) -> list[Request]: ...

    async def list_by_status(self, db: AsyncSession, status: RequestStatus) -> list[Request]: ...

    async def increment_unread_bids(self, db: AsyncSession, request_id: str) -> None: ...

    async def reset_unread_bids(self, db: AsyncSession, request_id: str) -> None: ...

    async def accept_bid(
        self,
        db: AsyncSession,
        request_id: str,
        bid_id: str,
        photographer_id: str,
        amount: int,
        room_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None: ...

    async def approve_booking(
        self,
        db: AsyncSession,
        request_id: str,
        room_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None: ...

    async def transition(
        self,
        db: AsyncSession,
        request_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None: ...

    async def complete_delivery(
        self,
        db: AsyncSession,
        request_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None: ...

    async def resolve_dispute(
        self,
        db: AsyncSession,
        request_id: str,
        resolution: DisputeResolution,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None: ...

    async def mark_reviewed(
        self, db: AsyncSession, request_id: str, by_client: bool
    ) -> Request | None: ...
