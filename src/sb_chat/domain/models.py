"""Domain models for sb_chat — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class LastMessage:
    text: str
    timestamp: datetime
    sender_id: str


@dataclass
class ChatRoom:
    id: str
    user1_id: str                  # participants stored sorted: user1_id < user2_id
    user2_id: str
    request_id: str | None = None
    is_project_chat: bool = False
    last_message: LastMessage | None = None
    has_unread: dict[str, bool] = field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def participants(self) -> tuple[str, str]:
        return (self.user1_id, self.user2_id)

    def is_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    def partner_of(self, user_id: str) -> str:
        return self.user2_id if user_id == self.user1_id else self.user1_id


@dataclass
class ChatMessage:
    id: str
    room_id: str
    sender_id: str
    text: str
    media_url: str | None = None
    media_type: str | None = None
    media_name: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class UnifiedChatRoom:
    """Display-only merge of rooms sharing one participant pair. Never persisted."""

    id: str                          # synthetic pair key, never a real room id
    participants: tuple[str, str]
    representative: ChatRoom         # member with the latest message
    source_room_ids: tuple[str, ...]
    rooms: tuple[ChatRoom, ...]

    @property
    def last_message(self) -> LastMessage | None:
        return self.representative.last_message
