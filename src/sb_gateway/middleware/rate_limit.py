"""Fixed-window rate limiting backed by Redis.

Key pattern: "ratelimit:{client}:{epoch_minute}" where client is the bearer
token subject's hash prefix when present, otherwise the client IP (first hop
of X-Forwarded-For when behind a proxy).

    MULTI; INCR key; EXPIRE key 60; EXEC
    count > limit → 429 RateLimitError, Retry-After header
"""

import hashlib
import logging
import time

from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from src.sb_common.errors import RateLimitError
from src.sb_common.redis_client import hit_window
from src.sb_common.response import error_response

logger = logging.getLogger(__name__)

_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json"})
_WINDOW_SECONDS = 60


def client_key(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        return "tok:" + hashlib.sha256(token.encode()).hexdigest()[:16]
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return "ip:" + forwarded.split(",")[0].strip()
    return "ip:" + (request.client.host if request.client else "unknown")


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{client_key(request)}:{window}"
        try:
            count = await hit_window(key, _WINDOW_SECONDS)
        except RedisError:
            # Limiter unavailable: serve the request rather than fail every call
            logger.warning("Rate limiter unavailable, skipping check for %s", key)
            return await call_next(request)

        if count > settings.RATE_LIMIT_PER_MINUTE:
            err = RateLimitError()
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
