"""sb_chat REST API — participants only; admin views live in sb_admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_chat.application.schemas import DirectRoomRequest, SendMessageRequest
from src.sb_chat.application.service import ChatApplicationService
from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel

router = APIRouter(prefix="/chat", tags=["chat"])

_service = ChatApplicationService()


@router.get("/rooms")
async def list_my_rooms(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_my_rooms(db, str(current_user.id))
    return respond(request, data.model_dump())


@router.post("/rooms/direct")
async def get_or_create_direct_room(
    body: DirectRoomRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_or_create_direct_room(db, str(current_user.id), body.other_user_id)
    return respond(request, data.model_dump())


@router.get("/rooms/{room_id}/messages")
async def list_messages(
    room_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_messages(db, str(current_user.id), room_id)
    return respond(request, data.model_dump())


@router.get("/messages")
async def list_unified_messages(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    room_ids: list[str] = Query(..., min_length=1, description="source_room_ids of a conversation"),
) -> ApiResponse:
    data = await _service.list_unified_messages(db, str(current_user.id), room_ids)
    return respond(request, data.model_dump())


@router.post("/rooms/{room_id}/messages", status_code=201)
async def send_message(
    room_id: str,
    body: SendMessageRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.send_message(
        db,
        str(current_user.id),
        current_user.display_name,
        room_id,
        body.text,
        body.media_url,
        body.media_type.value if body.media_type else None,
        body.media_name,
    )
    return respond(request, data.model_dump())


@router.post("/rooms/{room_id}/read")
async def mark_room_read(
    room_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.mark_room_read(db, str(current_user.id), room_id)
    return respond(request, {"room_id": room_id, "has_unread": False})
