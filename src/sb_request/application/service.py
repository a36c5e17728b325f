"""RequestApplicationService — create, read and list requests."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import RequestStatus
from src.sb_common.errors import InternalError, RequestNotFoundError
from src.sb_common.id_generator import generate_id
from src.sb_request.application.schemas import (
    RequestListResponse,
    RequestResponse,
    cursor_decode,
    cursor_encode,
)
from src.sb_request.domain.models import Request
from src.sb_request.domain.repository import RequestRepositoryProtocol
from src.sb_request.infrastructure.persistence import RequestRepository


class RequestApplicationService:
    def __init__(self, repo: RequestRepositoryProtocol | None = None) -> None:
        self._repo: RequestRepositoryProtocol = repo or RequestRepository()

    async def create_request(
        self, db: AsyncSession, owner_id: str, title: str, description: str, budget: int
    ) -> RequestResponse:
        draft = Request(
            id=generate_id(),
            owner_id=owner_id,
            title=title,
            description=description,
            budget=budget,
            status=RequestStatus.OPEN.value,
        )
        try:
            created = await self._repo.insert_request(db, draft)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if created is None:
            raise InternalError(f"Request id collision: {draft.id}")
        return RequestResponse.from_domain(created)

    async def get_request(self, db: AsyncSession, request_id: str) -> RequestResponse:
        request = await self._repo.get_request(db, request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return RequestResponse.from_domain(request)

    async def list_open_requests(
        self, db: AsyncSession, cursor: str | None, limit: int
    ) -> RequestListResponse:
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._repo.list_open(db, cursor_decode(cursor), limit + 1)
        has_more = len(rows) > limit
        page = rows[:limit]
        last = page[-1] if page else None
        next_cursor = (
            cursor_encode(last.created_at, last.id)
            if has_more and last is not None and last.created_at is not None
            else None
        )
        return RequestListResponse(
            items=[RequestResponse.from_domain(r) for r in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def list_my_requests(self, db: AsyncSession, owner_id: str) -> RequestListResponse:
        rows = await self._repo.list_by_owner(db, owner_id)
        return RequestListResponse(items=[RequestResponse.from_domain(r) for r in rows])

    async def list_my_gigs(self, db: AsyncSession, photographer_id: str) -> RequestListResponse:
        rows = await self._repo.list_by_photographer(db, photographer_id)
        return RequestListResponse(items=[RequestResponse.from_domain(r) for r in rows])
