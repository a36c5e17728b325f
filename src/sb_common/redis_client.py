"""Redis access for the request rate limiter.

Only throttling counters live here. Balances, unread counters and request
status are PostgreSQL-only, so losing Redis never loses money or workflow
state; the limiter just stops limiting.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        # Short timeouts: a stalled limiter must not hold up API calls
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        )
    return _redis_pool


async def hit_window(key: str, window_seconds: int) -> int:
    """Count one hit in the window `key` and return the running total.

    INCR and EXPIRE go out in one MULTI so a crash between them cannot leave
    a counter without a TTL.
    """
    redis = await get_redis()
    async with redis.pipeline(transaction=True) as pipe:
        pipe.incr(key)
        pipe.expire(key, window_seconds)
        count, _ = await pipe.execute()
    return int(count)


async def ping_redis() -> None:
    redis = await get_redis()
    await redis.ping()


async def close_redis() -> None:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
