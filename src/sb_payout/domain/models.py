"""Domain models for sb_payout — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.sb_common.enums import PayoutStatus


@dataclass
class PayoutRequest:
    id: str
    user_id: str
    amount: int                 # cents, balance snapshot at request time
    status: str                 # PayoutStatus value
    requested_at: datetime | None = None
    completed_at: datetime | None = None
    transfer_id: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == PayoutStatus.PENDING.value
