"""sb_workflow REST API — acceptance, delivery, disputes, reports and reviews.

Admin-only transitions (approve booking, resolve dispute, disable) live in
sb_admin and call the same WorkflowService.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, respond
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.db_models import UserModel
from src.sb_workflow.application.acceptance import AcceptanceService
from src.sb_workflow.application.reports import ReportService
from src.sb_workflow.application.schemas import (
    ConfirmAcceptanceBody,
    DeliverBody,
    DisputeBody,
    FileReportBody,
    InitiateAcceptanceBody,
    ReviewBody,
)
from src.sb_workflow.application.service import WorkflowService
from src.sb_workflow.domain.models import DeliveredFile

router = APIRouter(tags=["workflow"])

_acceptance = AcceptanceService()
_workflow = WorkflowService()
_reports = ReportService()


@router.post("/requests/{request_id}/acceptance")
async def initiate_acceptance(
    request_id: str,
    body: InitiateAcceptanceBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _acceptance.initiate_acceptance(db, str(current_user.id), request_id, body.bid_id)
    return respond(request, data.model_dump())


@router.post("/acceptances/confirm")
async def confirm_acceptance(
    body: ConfirmAcceptanceBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _acceptance.confirm_acceptance(db, str(current_user.id), body.handle)
    return respond(request, data.model_dump())


@router.post("/requests/{request_id}/deliveries", status_code=201)
async def deliver(
    request_id: str,
    body: DeliverBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    files = [DeliveredFile(url=f.url, media_type=f.media_type.value, name=f.name) for f in body.files]
    data = await _workflow.deliver(db, str(current_user.id), request_id, files)
    return respond(request, data.model_dump())


@router.get("/requests/{request_id}/deliveries")
async def list_deliveries(
    request_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _workflow.list_deliveries(
        db, str(current_user.id), request_id, is_admin=current_user.is_admin
    )
    return respond(request, {"items": [d.model_dump() for d in items]})


@router.post("/requests/{request_id}/approve-delivery")
async def approve_delivery(
    request_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _workflow.approve_delivery(db, str(current_user.id), request_id)
    return respond(request, data.model_dump())


@router.post("/requests/{request_id}/disputes", status_code=201)
async def raise_dispute(
    request_id: str,
    body: DisputeBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _workflow.raise_dispute(
        db, str(current_user.id), request_id, body.reason, body.details
    )
    return respond(request, data.model_dump())


@router.post("/reports", status_code=201)
async def file_report(
    body: FileReportBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _reports.file_report(
        db,
        str(current_user.id),
        str(body.reported_user_id),
        body.context_type,
        body.context_id,
        body.reason,
        body.details,
    )
    return respond(request, data.model_dump())


@router.post("/requests/{request_id}/reviews", status_code=201)
async def submit_review(
    request_id: str,
    body: ReviewBody,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _workflow.submit_review(
        db, str(current_user.id), request_id, body.rating, body.comment
    )
    return respond(request, data.model_dump())


@router.get("/users/{user_id}/reviews")
async def list_reviews_for_user(
    user_id: uuid.UUID,
    _user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _workflow.list_reviews_for_user(db, str(user_id))
    return respond(request, {"items": [r.model_dump() for r in items]})
