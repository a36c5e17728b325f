"""NotificationRepository — raw SQL on the notifications table."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_notification.domain.models import Notification, NotificationPayload

_INSERT_SQL = text("""
    INSERT INTO notifications (id, user_id, type, title, message, link, related_id)
    VALUES (:id, :user_id, :type, :title, :message, :link, :related_id)
""")

_LIST_SQL = text("""
    SELECT id, user_id, type, title, message, link, related_id, is_read, created_at
    FROM notifications
    WHERE user_id = :user_id
      AND (CAST(:unread_only AS BOOLEAN) IS FALSE OR is_read = FALSE)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_COUNT_UNREAD_SQL = text("""
    SELECT COUNT(*) FROM notifications
    WHERE user_id = :user_id AND is_read = FALSE
""")

_MARK_READ_SQL = text("""
    UPDATE notifications SET is_read = TRUE
    WHERE id = :id AND user_id = :user_id
""")

_MARK_ALL_READ_SQL = text("""
    UPDATE notifications SET is_read = TRUE
    WHERE user_id = :user_id AND is_read = FALSE
""")


def _row_to_notification(row: Any) -> Notification:
    return Notification(
        id=row.id,
        user_id=str(row.user_id),
        type=row.type,
        title=row.title,
        message=row.message,
        link=row.link,
        related_id=row.related_id,
        is_read=row.is_read,
        created_at=to_utc_datetime(row.created_at),
    )


class NotificationRepository:
    async def insert(
        self,
        db: AsyncSession,
        notification_id: str,
        user_id: str,
        payload: NotificationPayload,
    ) -> None:
        await db.execute(
            _INSERT_SQL,
            {
                "id": notification_id,
                "user_id": user_id,
                "type": payload.type.value,
                "title": payload.title,
                "message": payload.message,
                "link": payload.link,
                "related_id": payload.related_id,
            },
        )

    async def list_for_user(
        self, db: AsyncSession, user_id: str, unread_only: bool, limit: int
    ) -> list[Notification]:
        result = await db.execute(
            _LIST_SQL, {"user_id": user_id, "unread_only": unread_only, "limit": limit}
        )
        return [_row_to_notification(row) for row in result.fetchall()]

    async def count_unread(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_COUNT_UNREAD_SQL, {"user_id": user_id})
        return int(result.scalar_one())

    async def mark_read(self, db: AsyncSession, user_id: str, notification_id: str) -> int:
        result = await db.execute(_MARK_READ_SQL, {"id": notification_id, "user_id": user_id})
        return result.rowcount

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"user_id": user_id})
        return result.rowcount
