"""Domain models for sb_request — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Request:
    id: str
    owner_id: str
    title: str
    description: str
    budget: int                              # cents
    status: str                              # RequestStatus value
    hired_photographer_id: str | None = None
    accepted_bid_amount: int | None = None   # cents; set together with hired_photographer_id
    booked_photographer_id: str | None = None  # direct-booking target while Pending
    project_chat_room_id: str | None = None
    unread_bid_count: int = 0
    dispute_resolution: str | None = None
    dispute_resolved_at: datetime | None = None
    client_has_reviewed: bool = False
    photographer_has_reviewed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def payment_amount(self) -> int | None:
        """What the photographer is owed: the accepted bid, else the budget."""
        if self.accepted_bid_amount is not None:
            return self.accepted_bid_amount
        return self.budget or None

    def is_owner(self, user_id: str) -> bool:
        return self.owner_id == user_id

    def is_hired(self, user_id: str) -> bool:
        return self.hired_photographer_id is not None and self.hired_photographer_id == user_id

    def counterparty_of(self, user_id: str) -> str | None:
        if self.is_owner(user_id):
            return self.hired_photographer_id
        if self.is_hired(user_id):
            return self.owner_id
        return None
