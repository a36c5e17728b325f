"""Admin REST API — every route requires the admin role."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_chat.application.service import ChatApplicationService
from src.sb_common.database import get_db_session
from src.sb_common.enums import ReportContext, ReportStatus
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import require_admin
from src.sb_gateway.user.db_models import UserModel
from src.sb_payout.application.service import PayoutService
from src.sb_workflow.application.reports import ReportService
from src.sb_workflow.application.schemas import ResolveDisputeBody
from src.sb_workflow.application.service import WorkflowService

router = APIRouter(prefix="/admin", tags=["admin"])

_workflow = WorkflowService()
_payouts = PayoutService()
_chat = ChatApplicationService()
_reports = ReportService()


@router.post("/requests/{request_id}/approve-booking")
async def approve_booking(
    request_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _workflow.approve_booking(db, str(admin.id), request_id)
    return respond(request, data.model_dump())


@router.post("/requests/{request_id}/resolve-dispute")
async def resolve_dispute(
    request_id: str,
    body: ResolveDisputeBody,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _workflow.resolve_dispute(db, str(admin.id), request_id, body.outcome)
    return respond(request, data.model_dump())


@router.post("/requests/{request_id}/disable")
async def disable_request(
    request_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _workflow.disable_request(db, str(admin.id), request_id)
    return respond(request, data.model_dump())


@router.get("/requests/disputed")
async def list_disputed_requests(
    _admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _workflow.list_disputed_requests(db)
    return respond(request, data.model_dump())


@router.get("/disputes")
async def list_open_disputes(
    _admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _workflow.list_open_disputes(db)
    return respond(request, {"items": [r.model_dump() for r in items]})


@router.get("/reports")
async def list_reports(
    _admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: ReportStatus | None = Query(ReportStatus.OPEN),
    context_type: ReportContext | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    data = await _reports.list_reports(db, status, context_type, limit)
    return respond(request, data.model_dump())


@router.post("/reports/{report_id}/resolve")
async def resolve_report(
    report_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _reports.resolve_report(db, str(admin.id), report_id)
    return respond(request, data.model_dump())


@router.get("/payouts")
async def list_pending_payouts(
    _admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _payouts.list_pending_payouts(db)
    return respond(request, data.model_dump())


@router.post("/payouts/{payout_id}/complete")
async def complete_payout(
    payout_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _payouts.complete_payout(db, str(admin.id), payout_id)
    return respond(request, data.model_dump())


@router.get("/chat/rooms")
async def list_unified_rooms(
    _admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _chat.list_unified_rooms(db)
    return respond(request, data.model_dump())


@router.get("/chat/messages")
async def list_unified_messages(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    room_ids: list[str] = Query(..., min_length=1, description="Source room ids"),
) -> ApiResponse:
    data = await _chat.list_unified_messages(db, str(admin.id), room_ids, is_admin=True)
    return respond(request, data.model_dump())
