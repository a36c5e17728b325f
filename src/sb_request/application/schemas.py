"""Pydantic schemas and cursor utilities for sb_request API."""

import base64
import json
from datetime import datetime

from pydantic import BaseModel, Field

from src.sb_common.cents import cents_to_display
from src.sb_payment.application.schemas import FeeBreakdownResponse
from src.sb_request.domain.models import Request

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(created_at: datetime, request_id: str) -> str:
    """Encode the (created_at, id) sort key into an opaque Base64 cursor string."""
    payload = json.dumps({"ts": created_at.isoformat(), "id": request_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime, str] | None:
    """Decode a cursor string back to the last seen sort key. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(payload["ts"]), str(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateRequestBody(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    budget_cents: int = Field(..., gt=0, description="Budget in cents")


class DirectBookingBody(CreateRequestBody):
    photographer_id: str


class ConfirmBookingBody(BaseModel):
    handle: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str
    budget_cents: int
    budget_display: str
    status: str
    hired_photographer_id: str | None
    accepted_bid_amount_cents: int | None
    booked_photographer_id: str | None
    project_chat_room_id: str | None
    unread_bid_count: int
    dispute_resolution: str | None
    dispute_resolved_at: str | None
    client_has_reviewed: bool
    photographer_has_reviewed: bool
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, r: Request) -> "RequestResponse":
        return cls(
            id=r.id,
            owner_id=r.owner_id,
            title=r.title,
            description=r.description,
            budget_cents=r.budget,
            budget_display=cents_to_display(r.budget),
            status=r.status,
            hired_photographer_id=r.hired_photographer_id,
            accepted_bid_amount_cents=r.accepted_bid_amount,
            booked_photographer_id=r.booked_photographer_id,
            project_chat_room_id=r.project_chat_room_id,
            unread_bid_count=r.unread_bid_count,
            dispute_resolution=r.dispute_resolution,
            dispute_resolved_at=r.dispute_resolved_at.isoformat() if r.dispute_resolved_at else None,
            client_has_reviewed=r.client_has_reviewed,
            photographer_has_reviewed=r.photographer_has_reviewed,
            created_at=r.created_at.isoformat() if r.created_at else None,
            updated_at=r.updated_at.isoformat() if r.updated_at else None,
        )


class RequestListResponse(BaseModel):
    items: list[RequestResponse]
    next_cursor: str | None = None
    has_more: bool = False


class PaymentInitResponse(BaseModel):
    """Returned by bid-acceptance and direct-booking initiation."""

    payment_id: str
    client_secret: str
    handle: str
    fee: FeeBreakdownResponse


class BookingResult(BaseModel):
    request: RequestResponse
    payment_ref: str
    idempotent_hit: bool = False
