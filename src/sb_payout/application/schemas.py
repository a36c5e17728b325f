"""Pydantic schemas for sb_payout API."""

from pydantic import BaseModel

from src.sb_common.cents import cents_to_display
from src.sb_payout.domain.models import PayoutRequest


class PayoutResponse(BaseModel):
    id: str
    user_id: str
    amount_cents: int
    amount_display: str
    status: str
    requested_at: str | None
    completed_at: str | None
    transfer_id: str | None

    @classmethod
    def from_domain(cls, p: PayoutRequest) -> "PayoutResponse":
        return cls(
            id=p.id,
            user_id=p.user_id,
            amount_cents=p.amount,
            amount_display=cents_to_display(p.amount),
            status=p.status,
            requested_at=p.requested_at.isoformat() if p.requested_at else None,
            completed_at=p.completed_at.isoformat() if p.completed_at else None,
            transfer_id=p.transfer_id,
        )


class PayoutListResponse(BaseModel):
    items: list[PayoutResponse]
