"""BidRepository — concrete implementation of BidRepositoryProtocol.

A bid insert is an INSERT ... SELECT guarded on the request still being Open
and not owned by the bidder. The partial unique index
`uq_bids_active_per_user (request_id, user_id) WHERE status = 'active'`
is the final guard against a double submit; its violation is reported as
DuplicateBidError. The insert runs in a SAVEPOINT so that violation does not
poison the caller's transaction.

Transaction ownership: the CALLER commits.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bid.domain.models import Bid
from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_common.errors import DuplicateBidError

_COLUMNS = "b.id, b.request_id, b.user_id, b.request_owner_id, b.amount, b.note, b.status, b.created_at"

_INSERT_SQL = text("""
    INSERT INTO bids (id, request_id, user_id, request_owner_id, amount, note, status)
    SELECT CAST(:id AS VARCHAR), r.id, CAST(:user_id AS UUID), r.owner_id,
           CAST(:amount AS BIGINT), CAST(:note AS TEXT), 'active'
    FROM requests r
    WHERE r.id = :request_id AND r.status = 'Open'
      AND r.owner_id <> CAST(:user_id AS UUID)
    RETURNING id, request_id, user_id, request_owner_id, amount, note, status, created_at
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM bids b WHERE b.id = :id")

_FIND_ACTIVE_SQL = text(f"""
    SELECT {_COLUMNS} FROM bids b
    WHERE b.request_id = :request_id AND b.user_id = :user_id AND b.status = 'active'
""")

_CANCEL_SQL = text("""
    UPDATE bids SET status = 'cancelled'
    WHERE id = :id AND user_id = :user_id AND status = 'active'
    RETURNING id, request_id, user_id, request_owner_id, amount, note, status, created_at
""")

_LIST_FOR_REQUEST_SQL = text(f"""
    SELECT {_COLUMNS}, u.display_name AS bidder_display_name
    FROM bids b JOIN users u ON u.id = b.user_id
    WHERE b.request_id = :request_id
    ORDER BY b.created_at DESC, b.id DESC
""")

_LIST_FOR_USER_SQL = text(f"""
    SELECT {_COLUMNS} FROM bids b
    WHERE b.user_id = :user_id
    ORDER BY b.created_at DESC, b.id DESC
""")

_DUPLICATE_INDEX = "uq_bids_active_per_user"


def _row_to_bid(row: Any) -> Bid:
    return Bid(
        id=row.id,
        request_id=row.request_id,
        user_id=str(row.user_id),
        request_owner_id=str(row.request_owner_id),
        amount=row.amount,
        note=row.note,
        status=row.status,
        created_at=to_utc_datetime(row.created_at),
        bidder_display_name=getattr(row, "bidder_display_name", None),
    )


class BidRepository:
    async def insert_bid(
        self,
        db: AsyncSession,
        bid_id: str,
        request_id: str,
        user_id: str,
        amount: int,
        note: str,
    ) -> Bid | None:
        """Returns None when the request is not Open (or the bidder owns it)."""
        try:
            async with db.begin_nested():
                result = await db.execute(
                    _INSERT_SQL,
                    {
                        "id": bid_id,
                        "request_id": request_id,
                        "user_id": user_id,
                        "amount": amount,
                        "note": note,
                    },
                )
                row = result.fetchone()
        except IntegrityError as e:
            if _DUPLICATE_INDEX in str(e.orig):
                raise DuplicateBidError(request_id) from e
            raise
        return _row_to_bid(row) if row else None

    async def get_bid(self, db: AsyncSession, bid_id: str) -> Bid | None:
        row = (await db.execute(_GET_SQL, {"id": bid_id})).fetchone()
        return _row_to_bid(row) if row else None

    async def find_active_bid(
        self, db: AsyncSession, request_id: str, user_id: str
    ) -> Bid | None:
        result = await db.execute(
            _FIND_ACTIVE_SQL, {"request_id": request_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def cancel_bid(self, db: AsyncSession, bid_id: str, user_id: str) -> Bid | None:
        """active -> cancelled; None if the bid is not active or not the caller's."""
        row = (await db.execute(_CANCEL_SQL, {"id": bid_id, "user_id": user_id})).fetchone()
        return _row_to_bid(row) if row else None

    async def list_for_request(self, db: AsyncSession, request_id: str) -> list[Bid]:
        result = await db.execute(_LIST_FOR_REQUEST_SQL, {"request_id": request_id})
        return [_row_to_bid(row) for row in result.fetchall()]

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[Bid]:
        result = await db.execute(_LIST_FOR_USER_SQL, {"user_id": user_id})
        return [_row_to_bid(row) for row in result.fetchall()]
