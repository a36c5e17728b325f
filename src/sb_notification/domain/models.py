"""Domain models for sb_notification — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from src.sb_common.enums import NotificationType


@dataclass(frozen=True)
class NotificationPayload:
    title: str
    message: str
    type: NotificationType
    link: str
    related_id: str | None = None


@dataclass
class Notification:
    id: str
    user_id: str
    type: str
    title: str
    message: str
    link: str
    related_id: str | None
    is_read: bool
    created_at: datetime | None = None


class NotifierProtocol(Protocol):
    """Fire-and-forget sink. Implementations must never raise."""

    async def send(self, user_id: str, payload: NotificationPayload) -> None: ...
