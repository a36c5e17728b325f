"""PayoutRepository — concrete implementation of PayoutRepositoryProtocol.

At most one pending payout per user is enforced by the partial unique index
`uq_payout_requests_pending_per_user (user_id) WHERE status = 'pending'`.
Two concurrent requests that both pass the service-level check still collide
there; the loser gets PendingPayoutExistsError. The insert runs in a SAVEPOINT
so that violation leaves the caller's transaction usable.

Transaction ownership: the CALLER commits.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_common.errors import PendingPayoutExistsError
from src.sb_payout.domain.models import PayoutRequest

_COLUMNS = "id, user_id, amount, status, requested_at, completed_at, transfer_id"

_INSERT_SQL = text(f"""
    INSERT INTO payout_requests (id, user_id, amount, status)
    VALUES (:id, :user_id, :amount, 'pending')
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM payout_requests WHERE id = :id")

_FIND_PENDING_SQL = text(f"""
    SELECT {_COLUMNS} FROM payout_requests
    WHERE user_id = :user_id AND status = 'pending'
""")

_MARK_COMPLETED_SQL = text(f"""
    UPDATE payout_requests
    SET status = 'completed', completed_at = NOW(), transfer_id = :transfer_id
    WHERE id = :id AND status = 'pending'
    RETURNING {_COLUMNS}
""")

_LIST_FOR_USER_SQL = text(f"""
    SELECT {_COLUMNS} FROM payout_requests
    WHERE user_id = :user_id
    ORDER BY requested_at DESC, id DESC
""")

_LIST_PENDING_SQL = text(f"""
    SELECT {_COLUMNS} FROM payout_requests
    WHERE status = 'pending'
    ORDER BY requested_at, id
""")

_PENDING_INDEX = "uq_payout_requests_pending_per_user"


def _row_to_payout(row: Any) -> PayoutRequest:
    return PayoutRequest(
        id=row.id,
        user_id=str(row.user_id),
        amount=row.amount,
        status=row.status,
        requested_at=to_utc_datetime(row.requested_at),
        completed_at=to_utc_datetime(row.completed_at),
        transfer_id=row.transfer_id,
    )


class PayoutRepository:
    async def insert_payout(
        self, db: AsyncSession, payout_id: str, user_id: str, amount: int
    ) -> PayoutRequest:
        try:
            async with db.begin_nested():
                result = await db.execute(
                    _INSERT_SQL, {"id": payout_id, "user_id": user_id, "amount": amount}
                )
                row = result.fetchone()
        except IntegrityError as e:
            if _PENDING_INDEX in str(e.orig):
                raise PendingPayoutExistsError() from e
            raise
        return _row_to_payout(row)

    async def get_payout(self, db: AsyncSession, payout_id: str) -> PayoutRequest | None:
        row = (await db.execute(_GET_SQL, {"id": payout_id})).fetchone()
        return _row_to_payout(row) if row else None

    async def find_pending_for_user(
        self, db: AsyncSession, user_id: str
    ) -> PayoutRequest | None:
        row = (await db.execute(_FIND_PENDING_SQL, {"user_id": user_id})).fetchone()
        return _row_to_payout(row) if row else None

    async def mark_completed(
        self, db: AsyncSession, payout_id: str, transfer_id: str
    ) -> PayoutRequest | None:
        """pending -> completed; None if the payout is no longer pending."""
        result = await db.execute(
            _MARK_COMPLETED_SQL, {"id": payout_id, "transfer_id": transfer_id}
        )
        row = result.fetchone()
        return _row_to_payout(row) if row else None

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[PayoutRequest]:
        result = await db.execute(_LIST_FOR_USER_SQL, {"user_id": user_id})
        return [_row_to_payout(row) for row in result.fetchall()]

    async def list_pending(self, db: AsyncSession) -> list[PayoutRequest]:
        result = await db.execute(_LIST_PENDING_SQL)
        return [_row_to_payout(row) for row in result.fetchall()]
