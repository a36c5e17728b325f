"""ReportService — users flag a person or a request for moderation.

A plain report never touches request status or funds; it only lands in the
admin inbox. Raising a dispute is the status-changing variant and lives in
WorkflowService.raise_dispute.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import ReportContext, ReportStatus
from src.sb_common.errors import (
    NotPermittedError,
    ProfileNotFoundError,
    ReportNotFoundError,
    ReportNotOpenError,
    RequestNotFoundError,
)
from src.sb_common.id_generator import generate_id
from src.sb_profile.domain.repository import ProfileRepositoryProtocol
from src.sb_profile.infrastructure.persistence import ProfileRepository
from src.sb_request.domain.repository import RequestRepositoryProtocol
from src.sb_request.infrastructure.persistence import RequestRepository
from src.sb_workflow.application.schemas import ReportListResponse, ReportResponse
from src.sb_workflow.infrastructure.persistence import WorkflowRecordsRepository

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        records_repo: WorkflowRecordsRepository | None = None,
        profile_repo: ProfileRepositoryProtocol | None = None,
        request_repo: RequestRepositoryProtocol | None = None,
    ) -> None:
        self._records = records_repo or WorkflowRecordsRepository()
        self._profiles: ProfileRepositoryProtocol = profile_repo or ProfileRepository()
        self._requests: RequestRepositoryProtocol = request_repo or RequestRepository()

    async def file_report(
        self,
        db: AsyncSession,
        user_id: str,
        reported_user_id: str,
        context_type: ReportContext,
        context_id: str | None,
        reason: str,
        details: str,
    ) -> ReportResponse:
        if reported_user_id == user_id:
            raise NotPermittedError("cannot report yourself")
        if await self._profiles.get_profile(db, reported_user_id) is None:
            raise ProfileNotFoundError(reported_user_id)

        if context_type is ReportContext.USER:
            context_id = reported_user_id
        else:
            if not context_id or await self._requests.get_request(db, context_id) is None:
                raise RequestNotFoundError(context_id or "")

        try:
            report = await self._records.insert_report(
                db,
                generate_id(),
                context_type,
                context_id,
                user_id,
                reported_user_id,
                reason.strip(),
                details.strip(),
                is_dispute=False,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Report filed: id=%s %s=%s by=%s", report.id, context_type.value, context_id, user_id
        )
        return ReportResponse.from_domain(report)

    async def list_reports(
        self,
        db: AsyncSession,
        status: ReportStatus | None = ReportStatus.OPEN,
        context_type: ReportContext | None = None,
        limit: int = 100,
    ) -> ReportListResponse:
        rows = await self._records.list_reports(db, status, context_type, limit)
        return ReportListResponse(items=[ReportResponse.from_domain(r) for r in rows])

    async def resolve_report(
        self, db: AsyncSession, admin_id: str, report_id: str
    ) -> ReportResponse:
        try:
            report = await self._records.resolve_report(db, report_id)
            if report is None:
                existing = await self._records.get_report(db, report_id)
                if existing is None:
                    raise ReportNotFoundError(report_id)
                if existing.is_dispute:
                    raise NotPermittedError("dispute reports close when the dispute is resolved")
                raise ReportNotOpenError(report_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Report resolved: id=%s by=%s", report_id, admin_id)
        return ReportResponse.from_domain(report)
