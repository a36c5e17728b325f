"""Photographer directory — browse users who can be hired."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel
from src.sb_profile.application.service import ProfileApplicationService

router = APIRouter(prefix="/photographers", tags=["profile"])

_service = ProfileApplicationService()


@router.get("")
async def list_photographers(
    _user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    accepting_only: bool = True,
    q: str | None = Query(None, max_length=64),
    min_rating: float | None = Query(None, ge=1, le=5),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    data = await _service.list_photographers(db, accepting_only, q, min_rating, limit, offset)
    return respond(request, data.model_dump())
