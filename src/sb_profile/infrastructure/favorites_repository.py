"""FavoritesRepository — bookmarked photographers and requests.

The (user_id, item_type, item_id) primary key makes add and remove
idempotent; each reports whether it changed a row.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_common.enums import FavoriteType
from src.sb_profile.domain.models import Favorite

_ADD_SQL = text("""
    INSERT INTO favorites (user_id, item_type, item_id)
    VALUES (:user_id, :item_type, :item_id)
    ON CONFLICT (user_id, item_type, item_id) DO NOTHING
    RETURNING item_id
""")

_REMOVE_SQL = text("""
    DELETE FROM favorites
    WHERE user_id = :user_id AND item_type = :item_type AND item_id = :item_id
    RETURNING item_id
""")

_LIST_SQL = text("""
    SELECT user_id, item_type, item_id, created_at
    FROM favorites
    WHERE user_id = :user_id
      AND (CAST(:item_type AS TEXT) IS NULL OR item_type = CAST(:item_type AS TEXT))
    ORDER BY created_at DESC, item_id
""")


def _row_to_favorite(row: Any) -> Favorite:
    return Favorite(
        user_id=str(row.user_id),
        item_type=row.item_type,
        item_id=row.item_id,
        created_at=to_utc_datetime(row.created_at),
    )


class FavoritesRepository:
    async def add(
        self, db: AsyncSession, user_id: str, item_type: FavoriteType, item_id: str
    ) -> bool:
        result = await db.execute(
            _ADD_SQL, {"user_id": user_id, "item_type": item_type.value, "item_id": item_id}
        )
        return result.fetchone() is not None

    async def remove(
        self, db: AsyncSession, user_id: str, item_type: FavoriteType, item_id: str
    ) -> bool:
        result = await db.execute(
            _REMOVE_SQL, {"user_id": user_id, "item_type": item_type.value, "item_id": item_id}
        )
        return result.fetchone() is not None

    async def list_for_user(
        self, db: AsyncSession, user_id: str, item_type: FavoriteType | None = None
    ) -> list[Favorite]:
        result = await db.execute(
            _LIST_SQL,
            {"user_id": user_id, "item_type": item_type.value if item_type else None},
        )
        return [_row_to_favorite(r) for r in result.fetchall()]
