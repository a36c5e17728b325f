"""Pydantic schemas for sb_chat API."""

from pydantic import BaseModel, Field

from src.sb_chat.domain.models import ChatMessage, ChatRoom, UnifiedChatRoom
from src.sb_chat.domain.unify import resolve_send_target
from src.sb_common.enums import MediaType


class DirectRoomRequest(BaseModel):
    other_user_id: str


class SendMessageRequest(BaseModel):
    text: str = Field("", max_length=5000)
    media_url: str | None = Field(None, max_length=2048)
    media_type: MediaType | None = None
    media_name: str | None = Field(None, max_length=255)


class LastMessageItem(BaseModel):
    text: str
    timestamp: str
    sender_id: str


class ChatRoomItem(BaseModel):
    id: str
    participants: list[str]
    request_id: str | None
    is_project_chat: bool
    last_message: LastMessageItem | None
    has_unread: bool

    @classmethod
    def from_domain(cls, room: ChatRoom, viewer_id: str | None = None) -> "ChatRoomItem":
        last = room.last_message
        return cls(
            id=room.id,
            participants=list(room.participants),
            request_id=room.request_id,
            is_project_chat=room.is_project_chat,
            last_message=(
                LastMessageItem(
                    text=last.text, timestamp=last.timestamp.isoformat(), sender_id=last.sender_id
                )
                if last
                else None
            ),
            has_unread=bool(viewer_id and room.has_unread.get(viewer_id, False)),
        )


class UnifiedChatRoomItem(BaseModel):
    id: str                      # pair key, display only
    participants: list[str]
    source_room_ids: list[str]
    send_room_id: str            # concrete room to post into
    representative: ChatRoomItem
    has_unread: bool

    @classmethod
    def from_domain(
        cls, unified: UnifiedChatRoom, viewer_id: str | None = None
    ) -> "UnifiedChatRoomItem":
        return cls(
            id=unified.id,
            participants=list(unified.participants),
            source_room_ids=list(unified.source_room_ids),
            send_room_id=resolve_send_target(unified),
            representative=ChatRoomItem.from_domain(unified.representative, viewer_id),
            has_unread=bool(
                viewer_id and any(r.has_unread.get(viewer_id, False) for r in unified.rooms)
            ),
        )


class ChatMessageItem(BaseModel):
    id: str
    room_id: str
    sender_id: str
    text: str
    media_url: str | None
    media_type: str | None
    media_name: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, m: ChatMessage) -> "ChatMessageItem":
        return cls(
            id=m.id,
            room_id=m.room_id,
            sender_id=m.sender_id,
            text=m.text,
            media_url=m.media_url,
            media_type=m.media_type,
            media_name=m.media_name,
            created_at=m.created_at.isoformat() if m.created_at else None,
        )


class ConversationListResponse(BaseModel):
    items: list[UnifiedChatRoomItem]


class MessageListResponse(BaseModel):
    items: list[ChatMessageItem]
