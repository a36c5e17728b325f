"""sb_notification REST API — list and mark-read, caller's own notifications only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel
from src.sb_notification.application.service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

_service = NotificationService()


@router.get("")
async def list_notifications(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    data = await _service.list_notifications(db, str(current_user.id), unread_only, limit)
    return respond(request, data.model_dump())


@router.get("/unread-count")
async def unread_count(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    count = await _service.unread_count(db, str(current_user.id))
    return respond(request, {"unread_count": count})


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    updated = await _service.mark_read(db, str(current_user.id), notification_id)
    return respond(request, {"updated": updated})


@router.post("/read-all")
async def mark_all_read(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    updated = await _service.mark_all_read(db, str(current_user.id))
    return respond(request, {"updated": updated})
