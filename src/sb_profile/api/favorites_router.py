"""Favorites REST API — bookmark photographers and requests."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.enums import FavoriteType
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel
from src.sb_profile.application.favorites import FavoritesService

router = APIRouter(prefix="/favorites", tags=["favorites"])

_service = FavoritesService()


@router.get("")
async def list_favorites(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    item_type: FavoriteType | None = None,
) -> ApiResponse:
    data = await _service.list_favorites(db, str(current_user.id), item_type)
    return respond(request, data.model_dump())


@router.post("/{item_type}/{item_id}/toggle")
async def toggle_favorite(
    item_type: FavoriteType,
    item_id: Annotated[str, Path(min_length=1, max_length=64)],
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.toggle_favorite(db, str(current_user.id), item_type, item_id)
    return respond(request, data.model_dump())
