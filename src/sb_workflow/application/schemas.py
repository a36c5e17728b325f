"""Pydantic schemas for sb_workflow API."""

import uuid

from pydantic import BaseModel, Field

from src.sb_common.cents import cents_to_display
from src.sb_common.enums import DisputeResolution, MediaType, ReportContext
from src.sb_request.application.schemas import RequestResponse
from src.sb_workflow.domain.models import ContentDelivery, Report, Review

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class InitiateAcceptanceBody(BaseModel):
    bid_id: str


class ConfirmAcceptanceBody(BaseModel):
    handle: str = Field(..., min_length=1)


class DeliveredFileIn(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)
    media_type: MediaType
    name: str = Field(..., min_length=1, max_length=255)


class DeliverBody(BaseModel):
    files: list[DeliveredFileIn] = Field(..., min_length=1)


class DisputeBody(BaseModel):
    reason: str = Field(..., min_length=1, max_length=200)
    details: str = Field("", max_length=5000)


class FileReportBody(BaseModel):
    reported_user_id: uuid.UUID
    context_type: ReportContext
    # Defaults to reported_user_id for user reports; required for request reports
    context_id: str | None = Field(None, max_length=64)
    reason: str = Field(..., min_length=1, max_length=200)
    details: str = Field(..., min_length=10, max_length=5000)


class ResolveDisputeBody(BaseModel):
    outcome: DisputeResolution


class ReviewBody(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AcceptanceResult(BaseModel):
    request: RequestResponse
    payment_ref: str
    idempotent_hit: bool = False


class TransitionResult(BaseModel):
    request: RequestResponse
    credited_user_id: str | None = None
    credited_amount_cents: int = 0
    credited_amount_display: str = "$0.00"

    @classmethod
    def build(
        cls, request: RequestResponse, credited_user_id: str | None = None, amount: int = 0
    ) -> "TransitionResult":
        return cls(
            request=request,
            credited_user_id=credited_user_id,
            credited_amount_cents=amount,
            credited_amount_display=cents_to_display(amount),
        )


class DeliveredFileOut(BaseModel):
    url: str
    media_type: str
    name: str


class ContentDeliveryResponse(BaseModel):
    id: str
    request_id: str
    photographer_id: str
    files: list[DeliveredFileOut]
    created_at: str | None

    @classmethod
    def from_domain(cls, d: ContentDelivery) -> "ContentDeliveryResponse":
        return cls(
            id=d.id,
            request_id=d.request_id,
            photographer_id=d.photographer_id,
            files=[DeliveredFileOut(url=f.url, media_type=f.media_type, name=f.name) for f in d.files],
            created_at=d.created_at.isoformat() if d.created_at else None,
        )


class ReportResponse(BaseModel):
    id: str
    context_type: str
    context_id: str
    request_id: str | None
    reporter_id: str
    reported_user_id: str | None
    reason: str
    details: str
    is_dispute: bool
    status: str
    created_at: str | None

    @classmethod
    def from_domain(cls, r: Report) -> "ReportResponse":
        return cls(
            id=r.id,
            context_type=r.context_type,
            context_id=r.context_id,
            request_id=r.request_id,
            reporter_id=r.reporter_id,
            reported_user_id=r.reported_user_id,
            reason=r.reason,
            details=r.details,
            is_dispute=r.is_dispute,
            status=r.status,
            created_at=r.created_at.isoformat() if r.created_at else None,
        )


class ReportListResponse(BaseModel):
    items: list[ReportResponse]


class ReviewResponse(BaseModel):
    id: str
    request_id: str
    reviewer_id: str
    reviewee_id: str
    rating: int
    comment: str
    created_at: str | None

    @classmethod
    def from_domain(cls, r: Review) -> "ReviewResponse":
        return cls(
            id=r.id,
            request_id=r.request_id,
            reviewer_id=r.reviewer_id,
            reviewee_id=r.reviewee_id,
            rating=r.rating,
            comment=r.comment,
            created_at=r.created_at.isoformat() if r.created_at else None,
        )
