"""Notification sink and read-side service.

The sink is called by the workflow services after their transaction has
committed. It writes in its own session so a failure here can never roll back
the state change that triggered it; failures are logged and swallowed.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.sb_common.database import async_session_factory
from src.sb_common.id_generator import generate_id
from src.sb_notification.application.schemas import NotificationItem, NotificationListResponse
from src.sb_notification.domain.models import NotificationPayload
from src.sb_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationSink:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        repo: NotificationRepository | None = None,
    ) -> None:
        self._session_factory = session_factory or async_session_factory
        self._repo = repo or NotificationRepository()

    async def send(self, user_id: str, payload: NotificationPayload) -> None:
        if not user_id:
            return
        try:
            async with self._session_factory() as session:
                await self._repo.insert(session, generate_id(), user_id, payload)
                await session.commit()
        except Exception:
            logger.exception(
                "Notification failed: user=%s type=%s related=%s",
                user_id,
                payload.type.value,
                payload.related_id,
            )


class NotificationService:
    def __init__(self, repo: NotificationRepository | None = None) -> None:
        self._repo = repo or NotificationRepository()

    async def list_notifications(
        self, db: AsyncSession, user_id: str, unread_only: bool, limit: int
    ) -> NotificationListResponse:
        items = await self._repo.list_for_user(db, user_id, unread_only, limit)
        # Counted over all rows, not the returned page
        unread = await self._repo.count_unread(db, user_id)
        return NotificationListResponse(
            items=[NotificationItem.from_domain(n) for n in items],
            unread_count=unread,
        )

    async def unread_count(self, db: AsyncSession, user_id: str) -> int:
        return await self._repo.count_unread(db, user_id)

    async def mark_read(self, db: AsyncSession, user_id: str, notification_id: str) -> int:
        try:
            updated = await self._repo.mark_read(db, user_id, notification_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        try:
            updated = await self._repo.mark_all_read(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated
