"""Pydantic schemas for sb_profile API."""

from pydantic import BaseModel, Field

from src.sb_common.cents import cents_to_display
from src.sb_common.enums import FavoriteType
from src.sb_payment.application.schemas import EscrowPaymentItem
from src.sb_profile.domain.models import Favorite, PhotographerCard, Profile


class ProfileResponse(BaseModel):
    user_id: str
    username: str
    display_name: str
    email: str
    role: str
    balance_cents: int
    balance_display: str
    unread_gigs_count: int
    pending_review_count: int
    is_accepting_requests: bool
    payout_account_connected: bool

    @classmethod
    def from_domain(cls, p: Profile) -> "ProfileResponse":
        return cls(
            user_id=p.id,
            username=p.username,
            display_name=p.display_name,
            email=p.email,
            role=p.role,
            balance_cents=p.balance,
            balance_display=cents_to_display(p.balance),
            unread_gigs_count=p.unread_gigs_count,
            pending_review_count=p.pending_review_count,
            is_accepting_requests=p.is_accepting_requests,
            payout_account_connected=p.payout_account_id is not None,
        )


class BalanceResponse(BaseModel):
    user_id: str
    balance_cents: int
    balance_display: str


class AvailabilityRequest(BaseModel):
    is_accepting_requests: bool


class PayoutAccountRequest(BaseModel):
    account_id: str = Field(..., min_length=1, max_length=64)


class OnboardingResponse(BaseModel):
    url: str
    account_id: str


class EscrowHistoryResponse(BaseModel):
    items: list[EscrowPaymentItem]


class PhotographerCardItem(BaseModel):
    user_id: str
    username: str
    display_name: str
    is_accepting_requests: bool
    average_rating: float | None
    review_count: int

    @classmethod
    def from_domain(cls, c: PhotographerCard) -> "PhotographerCardItem":
        return cls(
            user_id=c.id,
            username=c.username,
            display_name=c.display_name,
            is_accepting_requests=c.is_accepting_requests,
            average_rating=c.average_rating,
            review_count=c.review_count,
        )


class PhotographerListResponse(BaseModel):
    items: list[PhotographerCardItem]
    has_more: bool


class FavoriteItem(BaseModel):
    item_type: FavoriteType
    item_id: str
    created_at: str | None = None

    @classmethod
    def from_domain(cls, f: Favorite) -> "FavoriteItem":
        return cls(
            item_type=FavoriteType(f.item_type),
            item_id=f.item_id,
            created_at=f.created_at.isoformat() if f.created_at else None,
        )


class FavoriteToggleResponse(BaseModel):
    item_type: FavoriteType
    item_id: str
    is_favorite: bool


class FavoriteListResponse(BaseModel):
    items: list[FavoriteItem]
