"""sb_bid REST API — bids on requests, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bid.application.schemas import PlaceBidRequest
from src.sb_bid.application.service import BidApplicationService
from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel

router = APIRouter(tags=["bids"])

_service = BidApplicationService()


@router.post("/requests/{request_id}/bids", status_code=201)
async def place_bid(
    request_id: str,
    body: PlaceBidRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.place_bid(
        db, str(current_user.id), request_id, body.amount_cents, body.note
    )
    return respond(request, data.model_dump())


@router.get("/requests/{request_id}/bids")
async def list_bids(
    request_id: str,
    _user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_bids(db, request_id)
    return respond(request, data.model_dump())


@router.post("/requests/{request_id}/bids/seen")
async def mark_bids_seen(
    request_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.mark_bids_seen(db, str(current_user.id), request_id)
    return respond(request, {"request_id": request_id, "unread_bid_count": 0})


@router.get("/bids/mine")
async def list_my_bids(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_my_bids(db, str(current_user.id))
    return respond(request, data.model_dump())


@router.post("/bids/{bid_id}/cancel")
async def cancel_bid(
    bid_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.cancel_bid(db, str(current_user.id), bid_id)
    return respond(request, data.model_dump())
