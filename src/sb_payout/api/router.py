"""sb_payout REST API — the caller's own payout requests.

Listing pending payouts and completing them is admin-only and lives in sb_admin.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel
from src.sb_payout.application.service import PayoutService

router = APIRouter(prefix="/payouts", tags=["payouts"])

_service = PayoutService()


@router.post("", status_code=201)
async def request_payout(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.request_payout(db, str(current_user.id))
    return respond(request, data.model_dump())


@router.get("")
async def list_my_payouts(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_my_payouts(db, str(current_user.id))
    return respond(request, data.model_dump())
