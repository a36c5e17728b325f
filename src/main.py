"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.sb_admin.api.router import router as admin_router
from src.sb_bid.api.router import router as bid_router
from src.sb_chat.api.router import router as chat_router
from src.sb_common.database import engine
from src.sb_common.errors import AppError
from src.sb_common.redis_client import close_redis, ping_redis
from src.sb_common.response import error_response
from src.sb_gateway.api.router import router as auth_router
from src.sb_gateway.middleware.rate_limit import RateLimitMiddleware
from src.sb_gateway.middleware.request_log import RequestLogMiddleware
from src.sb_notification.api.router import router as notification_router
from src.sb_payment.api.router import router as payment_router
from src.sb_payout.api.router import router as payout_router
from src.sb_profile.api.favorites_router import router as favorites_router
from src.sb_profile.api.photographers_router import router as photographers_router
from src.sb_profile.api.router import router as profile_router
from src.sb_request.api.router import router as request_router
from src.sb_workflow.api.router import router as workflow_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.RATE_LIMIT_ENABLED:
        await ping_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Starlette runs the last-added middleware first: log wraps the limiter
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(profile_router, prefix="/api/v1")
app.include_router(photographers_router, prefix="/api/v1")
app.include_router(favorites_router, prefix="/api/v1")
app.include_router(request_router, prefix="/api/v1")
app.include_router(bid_router, prefix="/api/v1")
app.include_router(workflow_router, prefix="/api/v1")
app.include_router(payment_router, prefix="/api/v1")
app.include_router(payout_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
