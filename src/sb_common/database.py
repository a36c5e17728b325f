import json
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the ORM-mapped tables (users only; the rest is raw SQL)."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def csv(values: object) -> str:
    """Join enum members/strings for the `= ANY(string_to_array(:csv, ','))` guard pattern."""
    return ",".join(getattr(v, "value", str(v)) for v in values)  # type: ignore[attr-defined]


def load_json(value: Any) -> Any:
    """JSONB read through raw text() SQL arrives as str; typed columns arrive decoded."""
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
