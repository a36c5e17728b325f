"""ProfileRepository — concrete implementation of ProfileRepositoryProtocol.

Balances and counters are only ever changed by a single atomic UPDATE with a
relative SET (x = x + :delta). Concurrent credits and debits therefore commute
and no caller reads a value back to write it again.

A debit is guarded by `balance >= :amount`; 0 rows means the balance would go
negative (or the user does not exist) and the debit fails closed.

Transaction ownership: the CALLER commits.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_common.errors import InsufficientBalanceError, ProfileNotFoundError
from src.sb_profile.domain.models import PhotographerCard, Profile

_PROFILE_COLUMNS = """
    id, username, display_name, email, role, balance, unread_gigs_count,
    pending_review_count, is_accepting_requests, payout_account_id, created_at
"""

_GET_PROFILE_SQL = text(f"SELECT {_PROFILE_COLUMNS} FROM users WHERE id = :user_id")

_CREDIT_SQL = text("""
    UPDATE users
    SET balance = balance + :amount,
        updated_at = NOW()
    WHERE id = :user_id
    RETURNING balance
""")

_DEBIT_SQL = text("""
    UPDATE users
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE id = :user_id AND balance >= :amount
    RETURNING balance
""")

_GET_BALANCE_SQL = text("SELECT balance FROM users WHERE id = :user_id")

_INCREMENT_UNREAD_GIGS_SQL = text("""
    UPDATE users SET unread_gigs_count = unread_gigs_count + 1 WHERE id = :user_id
""")

_RESET_UNREAD_GIGS_SQL = text("""
    UPDATE users SET unread_gigs_count = 0 WHERE id = :user_id
""")

_INCREMENT_PENDING_REVIEWS_SQL = text("""
    UPDATE users SET pending_review_count = pending_review_count + 1 WHERE id = :user_id
""")

# Advisory badge: floor at zero instead of failing
_DECREMENT_PENDING_REVIEWS_SQL = text("""
    UPDATE users SET pending_review_count = GREATEST(pending_review_count - 1, 0)
    WHERE id = :user_id
""")

_SET_ACCEPTING_SQL = text(f"""
    UPDATE users SET is_accepting_requests = :accepting, updated_at = NOW()
    WHERE id = :user_id
    RETURNING {_PROFILE_COLUMNS}
""")

_SAVE_PAYOUT_ACCOUNT_SQL = text(f"""
    UPDATE users SET payout_account_id = :account_id, updated_at = NOW()
    WHERE id = :user_id
    RETURNING {_PROFILE_COLUMNS}
""")


# Ordinary (non-admin, active) users; any of them can be hired as a photographer
_LIST_PHOTOGRAPHERS_SQL = text("""
    SELECT u.id, u.username, u.display_name, u.is_accepting_requests,
           r.average_rating, COALESCE(r.review_count, 0) AS review_count
    FROM users u
    LEFT JOIN (
        SELECT reviewee_id, AVG(rating)::FLOAT AS average_rating, COUNT(*) AS review_count
        FROM reviews
        GROUP BY reviewee_id
    ) r ON r.reviewee_id = u.id
    WHERE u.role = 'user' AND u.is_active
      AND (CAST(:accepting_only AS BOOLEAN) IS FALSE OR u.is_accepting_requests)
      AND (CAST(:pattern AS TEXT) IS NULL
           OR u.display_name ILIKE CAST(:pattern AS TEXT)
           OR u.username ILIKE CAST(:pattern AS TEXT))
      AND (CAST(:min_rating AS FLOAT) IS NULL OR r.average_rating >= CAST(:min_rating AS FLOAT))
    ORDER BY review_count DESC, u.display_name, u.id
    LIMIT :limit OFFSET :offset
""")


def _like_pattern(query: str | None) -> str | None:
    if not query or not query.strip():
        return None
    escaped = query.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _row_to_profile(row: Any) -> Profile:
    return Profile(
        id=str(row.id),
        username=row.username,
        display_name=row.display_name,
        email=row.email,
        role=row.role,
        balance=row.balance,
        unread_gigs_count=row.unread_gigs_count,
        pending_review_count=row.pending_review_count,
        is_accepting_requests=row.is_accepting_requests,
        payout_account_id=row.payout_account_id,
        created_at=to_utc_datetime(row.created_at),
    )


class ProfileRepository:
    async def get_profile(self, db: AsyncSession, user_id: str) -> Profile | None:
        result = await db.execute(_GET_PROFILE_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_profile(row) if row else None

    async def credit_balance(self, db: AsyncSession, user_id: str, amount: int) -> int:
        """Add `amount` cents; returns the new balance."""
        result = await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise ProfileNotFoundError(user_id)
        return int(row.balance)

    async def debit_balance(self, db: AsyncSession, user_id: str, amount: int) -> int:
        """Subtract `amount` cents; returns the new balance.

        Raises InsufficientBalanceError if the balance would go negative.
        """
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is not None:
            return int(row.balance)

        current = await db.execute(_GET_BALANCE_SQL, {"user_id": user_id})
        current_row = current.fetchone()
        if current_row is None:
            raise ProfileNotFoundError(user_id)
        raise InsufficientBalanceError(required=amount, available=int(current_row.balance))

    async def increment_unread_gigs(self, db: AsyncSession, user_id: str) -> None:
        await db.execute(_INCREMENT_UNREAD_GIGS_SQL, {"user_id": user_id})

    async def reset_unread_gigs(self, db: AsyncSession, user_id: str) -> None:
        await db.execute(_RESET_UNREAD_GIGS_SQL, {"user_id": user_id})

    async def increment_pending_reviews(self, db: AsyncSession, user_id: str) -> None:
        await db.execute(_INCREMENT_PENDING_REVIEWS_SQL, {"user_id": user_id})

    async def decrement_pending_reviews(self, db: AsyncSession, user_id: str) -> None:
        await db.execute(_DECREMENT_PENDING_REVIEWS_SQL, {"user_id": user_id})

    async def set_accepting_requests(
        self, db: AsyncSession, user_id: str, accepting: bool
    ) -> Profile:
        result = await db.execute(
            _SET_ACCEPTING_SQL, {"user_id": user_id, "accepting": accepting}
        )
        row = result.fetchone()
        if row is None:
            raise ProfileNotFoundError(user_id)
        return _row_to_profile(row)

    async def save_payout_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> Profile:
        result = await db.execute(
            _SAVE_PAYOUT_ACCOUNT_SQL, {"user_id": user_id, "account_id": account_id}
        )
        row = result.fetchone()
        if row is None:
            raise ProfileNotFoundError(user_id)
        return _row_to_profile(row)

    async def list_photographers(
        self,
        db: AsyncSession,
        accepting_only: bool,
        query: str | None,
        min_rating: float | None,
        limit: int,
        offset: int,
    ) -> list[PhotographerCard]:
        result = await db.execute(
            _LIST_PHOTOGRAPHERS_SQL,
            {
                "accepting_only": accepting_only,
                "pattern": _like_pattern(query),
                "min_rating": min_rating,
                "limit": limit,
                "offset": offset,
            },
        )
        return [
            PhotographerCard(
                id=str(row.id),
                username=row.username,
                display_name=row.display_name,
                is_accepting_requests=row.is_accepting_requests,
                average_rating=(
                    round(float(row.average_rating), 2) if row.average_rating is not None else None
                ),
                review_count=int(row.review_count),
            )
            for row in result.fetchall()
        ]
