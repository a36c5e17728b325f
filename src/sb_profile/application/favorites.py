"""FavoritesService — toggle and list a user's bookmarks."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import FavoriteType, UserRole
from src.sb_common.errors import NotPermittedError, ProfileNotFoundError, RequestNotFoundError
from src.sb_profile.application.schemas import (
    FavoriteItem,
    FavoriteListResponse,
    FavoriteToggleResponse,
)
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.favorites_repository import FavoritesRepository
from src.sb_profile.infrastructure.persistence import ProfileRepository
from src.sb_request.domain.repository import RequestRepositoryProtocol
from src.sb_request.infrastructure.persistence import RequestRepository

logger = logging.getLogger(__name__)


class FavoritesService:
    def __init__(
        self,
        favorites_repo: FavoritesRepository | None = None,
        profile_repo: ProfileRepositoryProtocol | None = None,
        request_repo: RequestRepositoryProtocol | None = None,
    ) -> None:
        self._favorites = favorites_repo or FavoritesRepository()
        self._profiles: ProfileRepositoryProtocol = profile_repo or ProfileRepository()
        self._requests: RequestRepositoryProtocol = request_repo or RequestRepository()

    async def toggle_favorite(
        self, db: AsyncSession, user_id: str, item_type: FavoriteType, item_id: str
    ) -> FavoriteToggleResponse:
        """Remove the bookmark if present, otherwise validate the target and add it."""
        try:
            if await self._favorites.remove(db, user_id, item_type, item_id):
                is_favorite = False
            else:
                await self._check_target(db, user_id, item_type, item_id)
                # A concurrent toggle may have added it first; either way it is now set
                await self._favorites.add(db, user_id, item_type, item_id)
                is_favorite = True
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.debug(
            "Favorite toggled: user=%s %s=%s on=%s", user_id, item_type.value, item_id, is_favorite
        )
        return FavoriteToggleResponse(item_type=item_type, item_id=item_id, is_favorite=is_favorite)

    async def list_favorites(
        self, db: AsyncSession, user_id: str, item_type: FavoriteType | None = None
    ) -> FavoriteListResponse:
        rows = await self._favorites.list_for_user(db, user_id, item_type)
        return FavoriteListResponse(items=[FavoriteItem.from_domain(f) for f in rows])

    async def _check_target(
        self, db: AsyncSession, user_id: str, item_type: FavoriteType, item_id: str
    ) -> None:
        if item_type is FavoriteType.REQUEST:
            if await self._requests.get_request(db, item_id) is None:
                raise RequestNotFoundError(item_id)
            return

        try:
            uuid.UUID(item_id)
        except ValueError:
            raise ProfileNotFoundError(item_id) from None
        if item_id == user_id:
            raise NotPermittedError("cannot favorite yourself")
        profile = await self._profiles.get_profile(db, item_id)
        if profile is None or profile.role != UserRole.USER:
            raise ProfileNotFoundError(item_id)
