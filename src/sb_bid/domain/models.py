"""Domain models for sb_bid — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.sb_common.enums import BidStatus


@dataclass
class Bid:
    id: str
    request_id: str
    user_id: str            # bidder
    request_owner_id: str
    amount: int             # cents, immutable after creation
    note: str
    status: str             # BidStatus value
    created_at: datetime | None = None
    bidder_display_name: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == BidStatus.ACTIVE.value
