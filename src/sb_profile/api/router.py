"""sb_profile REST API — the caller's own profile, balance and payout account."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel
from src.sb_payment.domain.bridge import PaymentBridgeProtocol
from src.sb_payment.infrastructure.bridge_factory import get_payment_bridge
from src.sb_profile.application.schemas import AvailabilityRequest, PayoutAccountRequest
from src.sb_profile.application.service import ProfileApplicationService

router = APIRouter(prefix="/profile", tags=["profile"])

_service = ProfileApplicationService()


@router.get("/me")
async def get_my_profile(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_profile(db, str(current_user.id))
    return respond(request, data.model_dump())


@router.get("/me/balance")
async def get_my_balance(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, str(current_user.id))
    return respond(request, data.model_dump())


@router.put("/me/availability")
async def set_availability(
    body: AvailabilityRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_accepting_requests(
        db, str(current_user.id), body.is_accepting_requests
    )
    return respond(request, data.model_dump())


@router.post("/me/gigs/seen")
async def mark_gigs_seen(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.reset_unread_gigs(db, str(current_user.id))
    return respond(request, {"unread_gigs_count": 0})


@router.post("/me/payout-account/onboarding")
async def start_payout_onboarding(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    bridge: Annotated[PaymentBridgeProtocol, Depends(get_payment_bridge)],
    request: Request,
) -> ApiResponse:
    data = await _service.start_payout_onboarding(bridge, str(current_user.id), current_user.email)
    return respond(request, data.model_dump())


@router.put("/me/payout-account")
async def save_payout_account(
    body: PayoutAccountRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.save_payout_account(db, str(current_user.id), body.account_id)
    return respond(request, data.model_dump())


@router.get("/me/escrow-payments")
async def list_escrow_payments(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    data = await _service.list_escrow_payments(db, str(current_user.id), limit)
    return respond(request, data.model_dump())


@router.get("/{user_id}")
async def get_profile(
    user_id: uuid.UUID,
    _user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_profile(db, str(user_id))
    # Balance and payout details are private to the owner
    public = data.model_dump(
        include={"user_id", "username", "display_name", "role", "is_accepting_requests"}
    )
    return respond(request, public)
