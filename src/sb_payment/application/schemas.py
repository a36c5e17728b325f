"""Pydantic schemas for sb_payment API."""

from pydantic import BaseModel, Field

from src.sb_common.cents import cents_to_display
from src.sb_payment.domain.fee import FeeBreakdown
from src.sb_payment.domain.models import EscrowPayment


class CreateIntentRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, description="Amount to hold, in cents")
    metadata: dict[str, str] = Field(default_factory=dict)


class CreateIntentResponse(BaseModel):
    client_secret: str
    payment_id: str


class ConnectRequest(BaseModel):
    user_id: str
    email: str


class ConnectResponse(BaseModel):
    url: str
    account_id: str


class TransferRequest(BaseModel):
    amount_cents: int = Field(..., gt=0)
    destination: str = Field(..., min_length=1, description="Connected account id")


class TransferResponse(BaseModel):
    transfer_id: str


class FeeBreakdownResponse(BaseModel):
    amount_cents: int
    fee_cents: int
    total_cents: int
    amount_display: str
    fee_display: str
    total_display: str

    @classmethod
    def from_breakdown(cls, b: FeeBreakdown) -> "FeeBreakdownResponse":
        return cls(
            amount_cents=b.amount,
            fee_cents=b.fee,
            total_cents=b.total,
            amount_display=cents_to_display(b.amount),
            fee_display=cents_to_display(b.fee),
            total_display=cents_to_display(b.total),
        )


class EscrowPaymentItem(BaseModel):
    id: str
    request_id: str
    payer_id: str
    payee_id: str
    amount_cents: int
    amount_display: str
    status: str
    payment_date: str | None
    release_date: str | None

    @classmethod
    def from_domain(cls, e: EscrowPayment) -> "EscrowPaymentItem":
        return cls(
            id=e.id,
            request_id=e.request_id,
            payer_id=e.payer_id,
            payee_id=e.payee_id,
            amount_cents=e.amount,
            amount_display=cents_to_display(e.amount),
            status=e.status,
            payment_date=e.payment_date.isoformat() if e.payment_date else None,
            release_date=e.release_date.isoformat() if e.release_date else None,
        )
