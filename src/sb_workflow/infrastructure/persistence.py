"""WorkflowRecordsRepository — content deliveries, reports and reviews.

Reports are about a user or a request (context_type). Disputes are request
reports with is_dispute set; they are closed by resolving the dispute, never
through resolve_report.

Review ids are `<request_id>:<reviewer_id>`; the insert is ON CONFLICT DO
NOTHING so a second review by the same party is detected as an empty RETURNING.

Transaction ownership: the CALLER commits.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import load_json
from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_common.enums import ReportContext, ReportStatus
from src.sb_workflow.domain.models import ContentDelivery, DeliveredFile, Report, Review

_INSERT_DELIVERY_SQL = text("""
    INSERT INTO content_deliveries (id, request_id, photographer_id, files)
    VALUES (:id, :request_id, :photographer_id, CAST(:files AS JSONB))
    RETURNING id, request_id, photographer_id, files, created_at
""")

_LIST_DELIVERIES_SQL = text("""
    SELECT id, request_id, photographer_id, files, created_at
    FROM content_deliveries
    WHERE request_id = :request_id
    ORDER BY created_at, id
""")

_REPORT_COLUMNS = """
    id, request_id, reporter_id, reported_user_id, reason, details,
    is_dispute, status, context_type, context_id, created_at, resolved_at
"""

_INSERT_REPORT_SQL = text(f"""
    INSERT INTO reports (id, request_id, reporter_id, reported_user_id,
                         reason, details, is_dispute, status, context_type, context_id)
    VALUES (:id, :request_id, :reporter_id, :reported_user_id,
            :reason, :details, :is_dispute, 'open', :context_type, :context_id)
    RETURNING {_REPORT_COLUMNS}
""")

_GET_REPORT_SQL = text(f"SELECT {_REPORT_COLUMNS} FROM reports WHERE id = :id")

# Only dispute reports: a plain report on the same request stays in the admin inbox
_RESOLVE_DISPUTE_REPORTS_SQL = text("""
    UPDATE reports SET status = 'resolved', resolved_at = NOW()
    WHERE request_id = :request_id AND is_dispute = TRUE AND status = 'open'
""")

_RESOLVE_REPORT_SQL = text(f"""
    UPDATE reports SET status = 'resolved', resolved_at = NOW()
    WHERE id = :id AND status = 'open' AND is_dispute = FALSE
    RETURNING {_REPORT_COLUMNS}
""")

_LIST_OPEN_DISPUTES_SQL = text(f"""
    SELECT {_REPORT_COLUMNS}
    FROM reports
    WHERE is_dispute = TRUE AND status = 'open'
    ORDER BY created_at
""")

_LIST_REPORTS_SQL = text(f"""
    SELECT {_REPORT_COLUMNS}
    FROM reports
    WHERE (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
      AND (CAST(:context_type AS TEXT) IS NULL OR context_type = CAST(:context_type AS TEXT))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_INSERT_REVIEW_SQL = text("""
    INSERT INTO reviews (id, request_id, reviewer_id, reviewee_id, rating, comment)
    VALUES (:id, :request_id, :reviewer_id, :reviewee_id, :rating, :comment)
    ON CONFLICT (id) DO NOTHING
    RETURNING id, request_id, reviewer_id, reviewee_id, rating, comment, created_at
""")

_LIST_REVIEWS_FOR_USER_SQL = text("""
    SELECT id, request_id, reviewer_id, reviewee_id, rating, comment, created_at
    FROM reviews
    WHERE reviewee_id = :user_id
    ORDER BY created_at DESC
""")


def _row_to_delivery(row: Any) -> ContentDelivery:
    files = load_json(row.files) or []
    return ContentDelivery(
        id=row.id,
        request_id=row.request_id,
        photographer_id=str(row.photographer_id),
        files=[DeliveredFile(url=f["url"], media_type=f["media_type"], name=f["name"]) for f in files],
        created_at=to_utc_datetime(row.created_at),
    )


def _row_to_report(row: Any) -> Report:
    return Report(
        id=row.id,
        request_id=row.request_id,
        reporter_id=str(row.reporter_id),
        reported_user_id=str(row.reported_user_id) if row.reported_user_id else None,
        reason=row.reason,
        details=row.details,
        is_dispute=row.is_dispute,
        status=row.status,
        context_type=row.context_type,
        context_id=row.context_id,
        created_at=to_utc_datetime(row.created_at),
        resolved_at=to_utc_datetime(row.resolved_at),
    )


def _row_to_review(row: Any) -> Review:
    return Review(
        id=row.id,
        request_id=row.request_id,
        reviewer_id=str(row.reviewer_id),
        reviewee_id=str(row.reviewee_id),
        rating=row.rating,
        comment=row.comment,
        created_at=to_utc_datetime(row.created_at),
    )


class WorkflowRecordsRepository:
    async def insert_delivery(
        self,
        db: AsyncSession,
        delivery_id: str,
        request_id: str,
        photographer_id: str,
        files: list[DeliveredFile],
    ) -> ContentDelivery:
        payload = json.dumps(
            [{"url": f.url, "media_type": f.media_type, "name": f.name} for f in files]
        )
        result = await db.execute(
            _INSERT_DELIVERY_SQL,
            {
                "id": delivery_id,
                "request_id": request_id,
                "photographer_id": photographer_id,
                "files": payload,
            },
        )
        return _row_to_delivery(result.fetchone())

    async def list_deliveries(self, db: AsyncSession, request_id: str) -> list[ContentDelivery]:
        result = await db.execute(_LIST_DELIVERIES_SQL, {"request_id": request_id})
        return [_row_to_delivery(row) for row in result.fetchall()]

    async def insert_report(
        self,
        db: AsyncSession,
        report_id: str,
        context_type: ReportContext,
        context_id: str,
        reporter_id: str,
        reported_user_id: str | None,
        reason: str,
        details: str,
        is_dispute: bool,
    ) -> Report:
        is_request = context_type is ReportContext.REQUEST
        result = await db.execute(
            _INSERT_REPORT_SQL,
            {
                "id": report_id,
                "request_id": context_id if is_request else None,
                "context_type": context_type.value,
                "context_id": context_id,
                "reporter_id": reporter_id,
                "reported_user_id": reported_user_id,
                "reason": reason,
                "details": details,
                "is_dispute": is_dispute,
            },
        )
        return _row_to_report(result.fetchone())

    async def get_report(self, db: AsyncSession, report_id: str) -> Report | None:
        result = await db.execute(_GET_REPORT_SQL, {"id": report_id})
        row = result.fetchone()
        return _row_to_report(row) if row else None

    async def resolve_reports(self, db: AsyncSession, request_id: str) -> int:
        """Close the open dispute reports of a request."""
        result = await db.execute(_RESOLVE_DISPUTE_REPORTS_SQL, {"request_id": request_id})
        return result.rowcount

    async def resolve_report(self, db: AsyncSession, report_id: str) -> Report | None:
        """open -> resolved for a non-dispute report; None when the guard misses."""
        result = await db.execute(_RESOLVE_REPORT_SQL, {"id": report_id})
        row = result.fetchone()
        return _row_to_report(row) if row else None

    async def list_open_disputes(self, db: AsyncSession) -> list[Report]:
        result = await db.execute(_LIST_OPEN_DISPUTES_SQL)
        return [_row_to_report(row) for row in result.fetchall()]

    async def list_reports(
        self,
        db: AsyncSession,
        status: ReportStatus | None,
        context_type: ReportContext | None,
        limit: int,
    ) -> list[Report]:
        result = await db.execute(
            _LIST_REPORTS_SQL,
            {
                "status": status.value if status else None,
                "context_type": context_type.value if context_type else None,
                "limit": limit,
            },
        )
        return [_row_to_report(row) for row in result.fetchall()]

    async def insert_review(
        self,
        db: AsyncSession,
        review_id: str,
        request_id: str,
        reviewer_id: str,
        reviewee_id: str,
        rating: int,
        comment: str,
    ) -> Review | None:
        """Returns None when this reviewer already reviewed this request."""
        result = await db.execute(
            _INSERT_REVIEW_SQL,
            {
                "id": review_id,
                "request_id": request_id,
                "reviewer_id": reviewer_id,
                "reviewee_id": reviewee_id,
                "rating": rating,
                "comment": comment,
            },
        )
        row = result.fetchone()
        return _row_to_review(row) if row else None

    async def list_reviews_for_user(self, db: AsyncSession, user_id: str) -> list[Review]:
        result = await db.execute(_LIST_REVIEWS_FOR_USER_SQL, {"user_id": user_id})
        return [_row_to_review(row) for row in result.fetchall()]
