"""Pydantic schemas for sb_notification API."""

from pydantic import BaseModel

from src.sb_notification.domain.models import Notification


class NotificationItem(BaseModel):
    id: str
    type: str
    title: str
    message: str
    link: str
    related_id: str | None
    is_read: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationItem":
        return cls(
            id=n.id,
            type=n.type,
            title=n.title,
            message=n.message,
            link=n.link,
            related_id=n.related_id,
            is_read=n.is_read,
            created_at=n.created_at.isoformat() if n.created_at else None,
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationItem]
    unread_count: int
