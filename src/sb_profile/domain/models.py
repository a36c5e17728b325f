"""Domain models for sb_profile — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Profile:
    id: str
    username: str
    display_name: str
    email: str
    role: str
    balance: int                 # cents, withdrawable
    unread_gigs_count: int
    pending_review_count: int
    is_accepting_requests: bool
    payout_account_id: str | None = None
    created_at: datetime | None = None


@dataclass
class PhotographerCard:
    """Directory entry: public identity plus review aggregate."""

    id: str
    username: str
    display_name: str
    is_accepting_requests: bool
    average_rating: float | None
    review_count: int


@dataclass
class Favorite:
    user_id: str
    item_type: str     # FavoriteType value
    item_id: str
    created_at: datetime | None = None
