"""sb_payment REST API — thin proxies onto the configured payment bridge.

intent/connect require an authenticated caller; transfer and release move
platform money and are admin-only.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.sb_common.errors import NotPermittedError
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user, require_admin
from src.sb_gateway.user.db_models import UserModel
from src.sb_payment.application.schemas import (
    ConnectRequest,
    ConnectResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    FeeBreakdownResponse,
    TransferRequest,
    TransferResponse,
)
from src.sb_payment.domain.bridge import IntentMetadata, PaymentBridgeProtocol
from src.sb_payment.domain.fee import fee_breakdown
from src.sb_payment.infrastructure.bridge_factory import get_payment_bridge

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/fee")
async def get_fee(
    request: Request,
    amount_cents: int = Query(..., gt=0),
) -> ApiResponse:
    data = FeeBreakdownResponse.from_breakdown(fee_breakdown(amount_cents))
    return respond(request, data.model_dump())


@router.post("/intent")
async def create_intent(
    body: CreateIntentRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    bridge: Annotated[PaymentBridgeProtocol, Depends(get_payment_bridge)],
    request: Request,
) -> ApiResponse:
    metadata = IntentMetadata(
        purpose=body.metadata.get("purpose", "adhoc"),
        extra={**body.metadata, "user_id": str(current_user.id)},
    )
    result = await bridge.create_intent(body.amount_cents, metadata)
    data = CreateIntentResponse(client_secret=result.client_secret, payment_id=result.payment_id)
    return respond(request, data.model_dump())


@router.post("/connect")
async def create_connect_account(
    body: ConnectRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    bridge: Annotated[PaymentBridgeProtocol, Depends(get_payment_bridge)],
    request: Request,
) -> ApiResponse:
    if body.user_id != str(current_user.id) and not current_user.is_admin:
        raise NotPermittedError("cannot onboard another user's payout account")
    result = await bridge.create_connect_account(body.user_id, body.email)
    data = ConnectResponse(url=result.url, account_id=result.account_id)
    return respond(request, data.model_dump())


@router.post("/transfer")
async def create_transfer(
    body: TransferRequest,
    _admin: Annotated[UserModel, Depends(require_admin)],
    bridge: Annotated[PaymentBridgeProtocol, Depends(get_payment_bridge)],
    request: Request,
) -> ApiResponse:
    result = await bridge.create_transfer(body.amount_cents, body.destination)
    return respond(request, TransferResponse(transfer_id=result.transfer_id).model_dump())


@router.post("/intent/{payment_id}/release")
async def release_intent(
    payment_id: str,
    _admin: Annotated[UserModel, Depends(require_admin)],
    bridge: Annotated[PaymentBridgeProtocol, Depends(get_payment_bridge)],
    request: Request,
) -> ApiResponse:
    await bridge.release_intent(payment_id)
    return respond(request, {"payment_id": payment_id, "released": True})
