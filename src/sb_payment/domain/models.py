"""Domain models for sb_payment — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class EscrowPayment:
    id: str                 # payment reference (payment intent id)
    request_id: str
    payer_id: str
    payee_id: str
    amount: int             # cents, photographer payable (fee excluded)
    status: str             # EscrowStatus value
    payment_date: datetime | None = None
    release_date: datetime | None = None
