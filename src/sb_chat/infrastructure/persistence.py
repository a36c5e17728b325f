"""ChatRepository — chat_rooms and chat_messages.

Room ids are deterministic (project:<request_id>, direct:<lo>:<hi>), so room
creation is an INSERT ... ON CONFLICT DO NOTHING and can be repeated safely.
Per-participant unread flags live in a JSONB map keyed by user id and are
updated with `||` so a write for one participant never clobbers the other.

Transaction ownership: the CALLER commits.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_chat.domain.models import ChatMessage, ChatRoom, LastMessage
from src.sb_common.database import load_json
from src.sb_common.datetime_utils import to_utc_datetime

_ROOM_COLUMNS = """
    id, user1_id, user2_id, request_id, is_project_chat,
    last_message_text, last_message_at, last_message_sender_id, has_unread, created_at
"""

_MESSAGE_COLUMNS = "id, room_id, sender_id, text, media_url, media_type, media_name, created_at"

_INSERT_ROOM_SQL = text("""
    INSERT INTO chat_rooms (id, user1_id, user2_id, request_id, is_project_chat)
    VALUES (:id, :user1_id, :user2_id, :request_id, :is_project_chat)
    ON CONFLICT (id) DO NOTHING
""")

_GET_ROOM_SQL = text(f"SELECT {_ROOM_COLUMNS} FROM chat_rooms WHERE id = :id")

_LIST_ROOMS_FOR_USER_SQL = text(f"""
    SELECT {_ROOM_COLUMNS} FROM chat_rooms
    WHERE user1_id = :user_id OR user2_id = :user_id
    ORDER BY last_message_at DESC NULLS LAST, id
""")

_LIST_ALL_ROOMS_SQL = text(f"""
    SELECT {_ROOM_COLUMNS} FROM chat_rooms
    WHERE last_message_at IS NOT NULL
    ORDER BY last_message_at DESC
    LIMIT :limit
""")

_INSERT_MESSAGE_SQL = text(f"""
    INSERT INTO chat_messages (id, room_id, sender_id, text, media_url, media_type, media_name)
    VALUES (:id, :room_id, :sender_id, :text, :media_url, :media_type, :media_name)
    RETURNING {_MESSAGE_COLUMNS}
""")

_UPDATE_SNAPSHOT_SQL = text("""
    UPDATE chat_rooms
    SET last_message_text = :text,
        last_message_at = :sent_at,
        last_message_sender_id = :sender_id,
        has_unread = has_unread
            || jsonb_build_object(CAST(:recipient_key AS TEXT), TRUE)
            || jsonb_build_object(CAST(:sender_key AS TEXT), FALSE)
    WHERE id = :room_id
""")

_MARK_READ_SQL = text("""
    UPDATE chat_rooms
    SET has_unread = has_unread || jsonb_build_object(CAST(:user_key AS TEXT), FALSE)
    WHERE id = :room_id
""")

_LIST_MESSAGES_SQL = text(f"""
    SELECT {_MESSAGE_COLUMNS} FROM chat_messages
    WHERE room_id = :room_id
    ORDER BY created_at, id
    LIMIT :limit
""")

_LIST_MESSAGES_FOR_ROOMS_SQL = text(f"""
    SELECT {_MESSAGE_COLUMNS} FROM chat_messages
    WHERE room_id IN :room_ids
    ORDER BY created_at, id
    LIMIT :limit
""").bindparams(bindparam("room_ids", expanding=True))


def _row_to_room(row: Any) -> ChatRoom:
    last = None
    if row.last_message_at is not None:
        last = LastMessage(
            text=row.last_message_text or "",
            timestamp=to_utc_datetime(row.last_message_at),
            sender_id=str(row.last_message_sender_id),
        )
    return ChatRoom(
        id=row.id,
        user1_id=str(row.user1_id),
        user2_id=str(row.user2_id),
        request_id=row.request_id,
        is_project_chat=row.is_project_chat,
        last_message=last,
        has_unread=dict(load_json(row.has_unread) or {}),
        created_at=to_utc_datetime(row.created_at),
    )


def _row_to_message(row: Any) -> ChatMessage:
    return ChatMessage(
        id=row.id,
        room_id=row.room_id,
        sender_id=str(row.sender_id),
        text=row.text,
        media_url=row.media_url,
        media_type=row.media_type,
        media_name=row.media_name,
        created_at=to_utc_datetime(row.created_at),
    )


class ChatRepository:
    async def ensure_room(
        self,
        db: AsyncSession,
        room_id: str,
        user_a: str,
        user_b: str,
        request_id: str | None = None,
    ) -> None:
        """Create the room if it does not exist yet; participants are stored sorted."""
        lo, hi = sorted((user_a, user_b))
        await db.execute(
            _INSERT_ROOM_SQL,
            {
                "id": room_id,
                "user1_id": lo,
                "user2_id": hi,
                "request_id": request_id,
                "is_project_chat": request_id is not None,
            },
        )

    async def get_room(self, db: AsyncSession, room_id: str) -> ChatRoom | None:
        row = (await db.execute(_GET_ROOM_SQL, {"id": room_id})).fetchone()
        return _row_to_room(row) if row else None

    async def list_rooms_for_user(self, db: AsyncSession, user_id: str) -> list[ChatRoom]:
        result = await db.execute(_LIST_ROOMS_FOR_USER_SQL, {"user_id": user_id})
        return [_row_to_room(row) for row in result.fetchall()]

    async def list_all_rooms(self, db: AsyncSession, limit: int = 500) -> list[ChatRoom]:
        result = await db.execute(_LIST_ALL_ROOMS_SQL, {"limit": limit})
        return [_row_to_room(row) for row in result.fetchall()]

    async def insert_message(
        self,
        db: AsyncSession,
        message_id: str,
        room: ChatRoom,
        sender_id: str,
        text_: str,
        media_url: str | None,
        media_type: str | None,
        media_name: str | None,
    ) -> ChatMessage:
        result = await db.execute(
            _INSERT_MESSAGE_SQL,
            {
                "id": message_id,
                "room_id": room.id,
                "sender_id": sender_id,
                "text": text_,
                "media_url": media_url,
                "media_type": media_type,
                "media_name": media_name,
            },
        )
        message = _row_to_message(result.fetchone())
        snapshot = text_ or (f"[{media_type}]" if media_type else "")
        await db.execute(
            _UPDATE_SNAPSHOT_SQL,
            {
                "room_id": room.id,
                "text": snapshot,
                "sent_at": message.created_at,
                "sender_id": sender_id,
                "sender_key": sender_id,
                "recipient_key": room.partner_of(sender_id),
            },
        )
        return message

    async def mark_read(self, db: AsyncSession, room_id: str, user_id: str) -> None:
        await db.execute(_MARK_READ_SQL, {"room_id": room_id, "user_key": user_id})

    async def list_messages(
        self, db: AsyncSession, room_id: str, limit: int = 500
    ) -> list[ChatMessage]:
        result = await db.execute(_LIST_MESSAGES_SQL, {"room_id": room_id, "limit": limit})
        return [_row_to_message(row) for row in result.fetchall()]

    async def list_messages_for_rooms(
        self, db: AsyncSession, room_ids: Sequence[str], limit: int = 1000
    ) -> list[ChatMessage]:
        if not room_ids:
            return []
        result = await db.execute(
            _LIST_MESSAGES_FOR_ROOMS_SQL, {"room_ids": list(room_ids), "limit": limit}
        )
        return [_row_to_message(row) for row in result.fetchall()]
