"""Pydantic schemas for sb_bid API."""

from pydantic import BaseModel, Field

from src.sb_bid.domain.models import Bid
from src.sb_common.cents import cents_to_display


class PlaceBidRequest(BaseModel):
    amount_cents: int = Field(..., description="Bid amount in cents")
    note: str = Field("", max_length=2000)


class BidResponse(BaseModel):
    id: str
    request_id: str
    user_id: str
    bidder_display_name: str | None
    amount_cents: int
    amount_display: str
    note: str
    status: str
    created_at: str | None

    @classmethod
    def from_domain(cls, b: Bid) -> "BidResponse":
        return cls(
            id=b.id,
            request_id=b.request_id,
            user_id=b.user_id,
            bidder_display_name=b.bidder_display_name,
            amount_cents=b.amount,
            amount_display=cents_to_display(b.amount),
            note=b.note,
            status=b.status,
            created_at=b.created_at.isoformat() if b.created_at else None,
        )


class BidListResponse(BaseModel):
    items: list[BidResponse]
