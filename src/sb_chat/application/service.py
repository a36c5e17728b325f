"""ChatApplicationService — rooms, messages and the unified conversation view."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_chat.application.schemas import (
    ChatMessageItem,
    ChatRoomItem,
    ConversationListResponse,
    MessageListResponse,
    UnifiedChatRoomItem,
)
from src.sb_chat.domain.models import ChatRoom
from src.sb_chat.domain.unify import unify_rooms
from src.sb_chat.infrastructure.persistence import ChatRepository
from src.sb_common.datetime_utils import to_epoch_millis
from src.sb_common.errors import (
    ChatRoomNotFoundError,
    EmptyMessageError,
    NotPermittedError,
    NotRoomParticipantError,
    ProfileNotFoundError,
    UnresolvedSendTargetError,
)
from src.sb_common.id_generator import direct_room_id, generate_id
from src.sb_notification.application.service import NotificationSink
from src.sb_notification.domain import messages
from src.sb_notification.domain.models import NotifierProtocol
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.persistence import ProfileRepository

_ROOM_ID_PREFIXES = ("project:", "direct:")


class ChatApplicationService:
    def __init__(
        self,
        repo: ChatRepository | None = None,
        profile_repo: ProfileRepositoryProtocol | None = None,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self._repo = repo or ChatRepository()
        self._profiles: ProfileRepositoryProtocol = profile_repo or ProfileRepository()
        self._notifier: NotifierProtocol = notifier or NotificationSink()

    async def _get_room_for(
        self, db: AsyncSession, user_id: str, room_id: str, is_admin: bool = False
    ) -> ChatRoom:
        if not room_id.startswith(_ROOM_ID_PREFIXES):
            # A unified pair key was passed where a concrete room is required
            raise UnresolvedSendTargetError(room_id)
        room = await self._repo.get_room(db, room_id)
        if room is None:
            raise ChatRoomNotFoundError(room_id)
        if not (is_admin or room.is_participant(user_id)):
            raise NotRoomParticipantError(room_id)
        return room

    async def get_or_create_direct_room(
        self, db: AsyncSession, user_id: str, other_user_id: str
    ) -> ChatRoomItem:
        if other_user_id == user_id:
            raise NotPermittedError("cannot open a chat with yourself")
        if await self._profiles.get_profile(db, other_user_id) is None:
            raise ProfileNotFoundError(other_user_id)

        room_id = direct_room_id(user_id, other_user_id)
        try:
            await self._repo.ensure_room(db, room_id, user_id, other_user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        room = await self._repo.get_room(db, room_id)
        if room is None:
            raise ChatRoomNotFoundError(room_id)
        return ChatRoomItem.from_domain(room, user_id)

    async def list_my_rooms(self, db: AsyncSession, user_id: str) -> ConversationListResponse:
        # A freshly hired job or opened direct chat must be reachable before its first message
        rooms = await self._repo.list_rooms_for_user(db, user_id)
        unified = unify_rooms(rooms, include_empty=True)
        return ConversationListResponse(
            items=[UnifiedChatRoomItem.from_domain(u, user_id) for u in unified]
        )

    async def send_message(
        self,
        db: AsyncSession,
        user_id: str,
        sender_name: str,
        room_id: str,
        text: str,
        media_url: str | None = None,
        media_type: str | None = None,
        media_name: str | None = None,
    ) -> ChatMessageItem:
        body = text.strip()
        if not body and not media_url:
            raise EmptyMessageError()
        room = await self._get_room_for(db, user_id, room_id)

        try:
            message = await self._repo.insert_message(
                db, generate_id(), room, user_id, body, media_url, media_type, media_name
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await self._notifier.send(
            room.partner_of(user_id),
            messages.new_message(room.id, room.request_id, room.is_project_chat, sender_name),
        )
        return ChatMessageItem.from_domain(message)

    async def list_messages(
        self, db: AsyncSession, user_id: str, room_id: str, is_admin: bool = False
    ) -> MessageListResponse:
        await self._get_room_for(db, user_id, room_id, is_admin)
        items = await self._repo.list_messages(db, room_id)
        return MessageListResponse(items=[ChatMessageItem.from_domain(m) for m in items])

    async def list_unified_messages(
        self, db: AsyncSession, user_id: str, room_ids: list[str], is_admin: bool = False
    ) -> MessageListResponse:
        """Messages of all source rooms of a unified conversation, oldest first."""
        for room_id in room_ids:
            await self._get_room_for(db, user_id, room_id, is_admin)
        items = await self._repo.list_messages_for_rooms(db, room_ids)
        items.sort(key=lambda m: (to_epoch_millis(m.created_at), m.id))
        return MessageListResponse(items=[ChatMessageItem.from_domain(m) for m in items])

    async def mark_room_read(self, db: AsyncSession, user_id: str, room_id: str) -> None:
        await self._get_room_for(db, user_id, room_id)
        try:
            await self._repo.mark_read(db, room_id, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def list_unified_rooms(self, db: AsyncSession) -> ConversationListResponse:
        rooms = await self._repo.list_all_rooms(db)
        return ConversationListResponse(
            items=[UnifiedChatRoomItem.from_domain(u) for u in unify_rooms(rooms)]
        )
