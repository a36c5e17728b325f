"""RequestRepository — concrete implementation of RequestRepositoryProtocol.

Status changes are single statements of the form

    UPDATE requests SET status = :to_status, ...
    WHERE id = :id AND status = ANY(string_to_array(:allowed, ','))
    RETURNING ...

so the check and the write cannot be separated by a concurrent caller. Zero
rows returned means the guard rejected the write; the caller decides whether
that is a precondition violation or a race loss.

Transaction ownership: the CALLER commits.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import csv
from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_common.enums import DisputeResolution, RequestStatus
from src.sb_request.domain.models import Request

_COLUMNS = """
    id, owner_id, title, description, budget, status,
    hired_photographer_id, accepted_bid_amount, booked_photographer_id,
    project_chat_room_id, unread_bid_count, dispute_resolution, dispute_resolved_at,
    client_has_reviewed, photographer_has_reviewed, created_at, updated_at
"""

_STATUS_GUARD = "status = ANY(string_to_array(CAST(:allowed AS TEXT), ','))"

# ---------------------------------------------------------------------------
# SQL: reads
# ---------------------------------------------------------------------------

_GET_SQL = text(f"SELECT {_COLUMNS} FROM requests WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM requests WHERE id = :id FOR UPDATE")

_LIST_OPEN_SQL = text(f"""
    SELECT {_COLUMNS} FROM requests
    WHERE status = 'Open'
      AND (CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
           OR (created_at, id) < (CAST(:cursor_ts AS TIMESTAMPTZ), :cursor_id))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_COLUMNS} FROM requests WHERE owner_id = :user_id
    ORDER BY created_at DESC, id DESC
""")

_LIST_BY_PHOTOGRAPHER_SQL = text(f"""
    SELECT {_COLUMNS} FROM requests
    WHERE hired_photographer_id = :user_id OR booked_photographer_id = :user_id
    ORDER BY created_at DESC, id DESC
""")

_LIST_BY_STATUS_SQL = text(f"""
    SELECT {_COLUMNS} FROM requests WHERE status = :status
    ORDER BY updated_at DESC, id DESC
""")

# ---------------------------------------------------------------------------
# SQL: writes
# ---------------------------------------------------------------------------

_INSERT_SQL = text(f"""
    INSERT INTO requests (id, owner_id, title, description, budget, status,
                          booked_photographer_id)
    VALUES (:id, :owner_id, :title, :description, :budget, :status,
            :booked_photographer_id)
    ON CONFLICT (id) DO NOTHING
    RETURNING {_COLUMNS}
""")

_INCREMENT_UNREAD_BIDS_SQL = text("""
    UPDATE requests SET unread_bid_count = unread_bid_count + 1 WHERE id = :id
""")

_RESET_UNREAD_BIDS_SQL = text("""
    UPDATE requests SET unread_bid_count = 0 WHERE id = :id
""")

# The bid must still be active and belong to this request and photographer
# inside the same statement, so a cancel racing an accept cannot slip through.
_ACCEPT_BID_SQL = text(f"""
    UPDATE requests r
    SET status = :to_status,
        hired_photographer_id = :photographer_id,
        accepted_bid_amount = :amount,
        project_chat_room_id = :room_id,
        unread_bid_count = 0,
        updated_at = NOW()
    WHERE r.id = :id
      AND r.{_STATUS_GUARD}
      AND EXISTS (
          SELECT 1 FROM bids b
          WHERE b.id = :bid_id
            AND b.request_id = r.id
            AND b.user_id = :photographer_id
            AND b.amount = :amount
            AND b.status = 'active'
      )
    RETURNING {_COLUMNS}
""")

_APPROVE_BOOKING_SQL = text(f"""
    UPDATE requests
    SET status = :to_status,
        hired_photographer_id = booked_photographer_id,
        accepted_bid_amount = budget,
        project_chat_room_id = :room_id,
        updated_at = NOW()
    WHERE id = :id
      AND {_STATUS_GUARD}
      AND booked_photographer_id IS NOT NULL
    RETURNING {_COLUMNS}
""")

_TRANSITION_SQL = text(f"""
    UPDATE requests
    SET status = :to_status, updated_at = NOW()
    WHERE id = :id AND {_STATUS_GUARD}
    RETURNING {_COLUMNS}
""")

_COMPLETE_DELIVERY_SQL = text(f"""
    UPDATE requests
    SET status = :to_status,
        client_has_reviewed = FALSE,
        photographer_has_reviewed = FALSE,
        updated_at = NOW()
    WHERE id = :id AND {_STATUS_GUARD}
    RETURNING {_COLUMNS}
""")

_RESOLVE_DISPUTE_SQL = text(f"""
    UPDATE requests
    SET status = :to_status,
        dispute_resolution = :resolution,
        dispute_resolved_at = NOW(),
        client_has_reviewed = FALSE,
        photographer_has_reviewed = FALSE,
        updated_at = NOW()
    WHERE id = :id AND {_STATUS_GUARD}
    RETURNING {_COLUMNS}
""")

_MARK_CLIENT_REVIEWED_SQL = text(f"""
    UPDATE requests SET client_has_reviewed = TRUE, updated_at = NOW()
    WHERE id = :id AND status = 'Completed' AND client_has_reviewed = FALSE
    RETURNING {_COLUMNS}
""")

_MARK_PHOTOGRAPHER_REVIEWED_SQL = text(f"""
    UPDATE requests SET photographer_has_reviewed = TRUE, updated_at = NOW()
    WHERE id = :id AND status = 'Completed' AND photographer_has_reviewed = FALSE
    RETURNING {_COLUMNS}
""")


def _opt_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _row_to_request(row: Any) -> Request:
    return Request(
        id=row.id,
        owner_id=str(row.owner_id),
        title=row.title,
        description=row.description,
        budget=row.budget,
        status=row.status,
        hired_photographer_id=_opt_str(row.hired_photographer_id),
        accepted_bid_amount=row.accepted_bid_amount,
        booked_photographer_id=_opt_str(row.booked_photographer_id),
        project_chat_room_id=row.project_chat_room_id,
        unread_bid_count=row.unread_bid_count,
        dispute_resolution=row.dispute_resolution,
        dispute_resolved_at=to_utc_datetime(row.dispute_resolved_at),
        client_has_reviewed=row.client_has_reviewed,
        photographer_has_reviewed=row.photographer_has_reviewed,
        created_at=to_utc_datetime(row.created_at),
        updated_at=to_utc_datetime(row.updated_at),
    )


def _one(result: Any) -> Request | None:
    row = result.fetchone()
    return _row_to_request(row) if row else None


class RequestRepository:
    async def insert_request(self, db: AsyncSession, request: Request) -> Request | None:
        """Insert; returns None if a request with this id already exists."""
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": request.id,
                "owner_id": request.owner_id,
                "title": request.title,
                "description": request.description,
                "budget": request.budget,
                "status": request.status,
                "booked_photographer_id": request.booked_photographer_id,
            },
        )
        return _one(result)

    async def get_request(self, db: AsyncSession, request_id: str) -> Request | None:
        return _one(await db.execute(_GET_SQL, {"id": request_id}))

    async def get_request_for_update(
        self, db: AsyncSession, request_id: str
    ) -> Request | None:
        return _one(await db.execute(_GET_FOR_UPDATE_SQL, {"id": request_id}))

    async def list_open(
        self,
        db: AsyncSession,
        cursor: tuple[datetime, str] | None,
        limit: int,
    ) -> list[Request]:
        cursor_ts, cursor_id = cursor if cursor else (None, "")
        result = await db.execute(
            _LIST_OPEN_SQL, {"cursor_ts": cursor_ts, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_request(row) for row in result.fetchall()]

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[Request]:
        result = await db.execute(_LIST_BY_OWNER_SQL, {"user_id": owner_id})
        return [_row_to_request(row) for row in result.fetchall()]

    async def list_by_photographer(self, db: AsyncSession, user_id: str) -> list[Request]:
        result = await db.execute(_LIST_BY_PHOTOGRAPHER_SQL, {"user_id": user_id})
        return [_row_to_request(row) for row in result.fetchall()]

    async def list_by_status(self, db: AsyncSession, status: RequestStatus) -> list[Request]:
        result = await db.execute(_LIST_BY_STATUS_SQL, {"status": status.value})
        return [_row_to_request(row) for row in result.fetchall()]

    async def increment_unread_bids(self, db: AsyncSession, request_id: str) -> None:
        await db.execute(_INCREMENT_UNREAD_BIDS_SQL, {"id": request_id})

    async def reset_unread_bids(self, db: AsyncSession, request_id: str) -> None:
        await db.execute(_RESET_UNREAD_BIDS_SQL, {"id": request_id})

    async def accept_bid(
        self,
        db: AsyncSession,
        request_id: str,
        bid_id: str,
        photographer_id: str,
        amount: int,
        room_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None:
        result = await db.execute(
            _ACCEPT_BID_SQL,
            {
                "id": request_id,
                "bid_id": bid_id,
                "photographer_id": photographer_id,
                "amount": amount,
                "room_id": room_id,
                "allowed": csv(allowed_from),
                "to_status": to_status.value,
            },
        )
        return _one(result)

    async def approve_booking(
        self,
        db: AsyncSession,
        request_id: str,
        room_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None:
        result = await db.execute(
            _APPROVE_BOOKING_SQL,
            {
                "id": request_id,
                "room_id": room_id,
                "allowed": csv(allowed_from),
                "to_status": to_status.value,
            },
        )
        return _one(result)

    async def transition(
        self,
        db: AsyncSession,
        request_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None:
        result = await db.execute(
            _TRANSITION_SQL,
            {"id": request_id, "allowed": csv(allowed_from), "to_status": to_status.value},
        )
        return _one(result)

    async def complete_delivery(
        self,
        db: AsyncSession,
        request_id: str,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None:
        result = await db.execute(
            _COMPLETE_DELIVERY_SQL,
            {"id": request_id, "allowed": csv(allowed_from), "to_status": to_status.value},
        )
        return _one(result)

    async def resolve_dispute(
        self,
        db: AsyncSession,
        request_id: str,
        resolution: DisputeResolution,
        allowed_from: Iterable[RequestStatus],
        to_status: RequestStatus,
    ) -> Request | None:
        result = await db.execute(
            _RESOLVE_DISPUTE_SQL,
            {
                "id": request_id,
                "resolution": resolution.value,
                "allowed": csv(allowed_from),
                "to_status": to_status.value,
            },
        )
        return _one(result)

    async def mark_reviewed(
        self, db: AsyncSession, request_id: str, by_client: bool
    ) -> Request | None:
        sql = _MARK_CLIENT_REVIEWED_SQL if by_client else _MARK_PHOTOGRAPHER_REVIEWED_SQL
        return _one(await db.execute(sql, {"id": request_id}))
