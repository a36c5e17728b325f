"""Domain models for the records the workflow writes alongside a transition."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class DeliveredFile:
    url: str           # durable URL returned by object storage
    media_type: str    # MediaType value
    name: str


@dataclass
class ContentDelivery:
    id: str
    request_id: str
    photographer_id: str
    files: list[DeliveredFile] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass
class Report:
    id: str
    request_id: str | None     # set for request reports and disputes
    reporter_id: str
    reported_user_id: str | None
    reason: str
    details: str
    is_dispute: bool
    status: str                # ReportStatus value
    context_type: str = "request"   # ReportContext value
    context_id: str = ""
    created_at: datetime | None = None
    resolved_at: datetime | None = None


@dataclass
class Review:
    id: str            # <request_id>:<reviewer_id>
    request_id: str
    reviewer_id: str
    reviewee_id: str
    rating: int        # 1..5
    comment: str
    created_at: datetime | None = None
