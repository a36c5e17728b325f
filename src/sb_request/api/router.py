"""sb_request REST API — requests and direct bookings, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel
from src.sb_request.application.booking import DirectBookingService
from src.sb_request.application.schemas import (
    ConfirmBookingBody,
    CreateRequestBody,
    DirectBookingBody,
)
from src.sb_request.application.service import RequestApplicationService

router = APIRouter(prefix="/requests", tags=["requests"])

_service = RequestApplicationService()
_booking = DirectBookingService()


@router.post("", status_code=201)
async def create_request(
    body: CreateRequestBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_request(
        db, str(current_user.id), body.title, body.description, body.budget_cents
    )
    return respond(request, data.model_dump())


@router.get("")
async def list_open_requests(
    _user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_open_requests(db, cursor, limit)
    return respond(request, data.model_dump())


@router.get("/mine")
async def list_my_requests(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_my_requests(db, str(current_user.id))
    return respond(request, data.model_dump())


@router.get("/gigs")
async def list_my_gigs(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_my_gigs(db, str(current_user.id))
    return respond(request, data.model_dump())


@router.post("/direct-booking")
async def initiate_direct_booking(
    body: DirectBookingBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _booking.initiate_direct_booking(
        db,
        str(current_user.id),
        body.photographer_id,
        body.title,
        body.description,
        body.budget_cents,
    )
    return respond(request, data.model_dump())


@router.post("/direct-booking/confirm", status_code=201)
async def confirm_direct_booking(
    body: ConfirmBookingBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _booking.confirm_direct_booking(db, str(current_user.id), body.handle)
    return respond(request, data.model_dump())


@router.get("/{request_id}")
async def get_request(
    request_id: str,
    _user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_request(db, request_id)
    return respond(request, data.model_dump())
