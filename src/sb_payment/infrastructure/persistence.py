"""EscrowRepository — escrow_payments records.

One row per payment reference. Insert is idempotent (ON CONFLICT DO NOTHING)
so a retried confirmation cannot record the same hold twice. Status moves
only out of `pending`.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.datetime_utils import to_utc_datetime
from src.sb_common.enums import EscrowStatus
from src.sb_payment.domain.models import EscrowPayment

_COLUMNS = "id, request_id, payer_id, payee_id, amount, status, payment_date, release_date"

_INSERT_SQL = text(f"""
    INSERT INTO escrow_payments (id, request_id, payer_id, payee_id, amount, status)
    VALUES (:id, :request_id, :payer_id, :payee_id, :amount, 'pending')
    ON CONFLICT (id) DO NOTHING
    RETURNING {_COLUMNS}
""")

_SETTLE_BY_REQUEST_SQL = text(f"""
    UPDATE escrow_payments
    SET status = :status, release_date = NOW()
    WHERE request_id = :request_id AND status = 'pending'
    RETURNING {_COLUMNS}
""")

_GET_BY_REQUEST_SQL = text(f"""
    SELECT {_COLUMNS} FROM escrow_payments
    WHERE request_id = :request_id
    ORDER BY payment_date DESC
    LIMIT 1
""")

_LIST_FOR_PAYEE_SQL = text(f"""
    SELECT {_COLUMNS} FROM escrow_payments
    WHERE payee_id = :user_id
    ORDER BY payment_date DESC
    LIMIT :limit
""")


def _row_to_escrow(row: Any) -> EscrowPayment:
    return EscrowPayment(
        id=row.id,
        request_id=row.request_id,
        payer_id=str(row.payer_id),
        payee_id=str(row.payee_id),
        amount=row.amount,
        status=row.status,
        payment_date=to_utc_datetime(row.payment_date),
        release_date=to_utc_datetime(row.release_date),
    )


class EscrowRepository:
    async def record_pending(
        self,
        db: AsyncSession,
        payment_ref: str,
        request_id: str,
        payer_id: str,
        payee_id: str,
        amount: int,
    ) -> EscrowPayment | None:
        """Returns None when the payment reference was already recorded."""
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": payment_ref,
                "request_id": request_id,
                "payer_id": payer_id,
                "payee_id": payee_id,
                "amount": amount,
            },
        )
        row = result.fetchone()
        return _row_to_escrow(row) if row else None

    async def settle_for_request(
        self, db: AsyncSession, request_id: str, status: EscrowStatus
    ) -> EscrowPayment | None:
        """pending -> released/refunded. None when there is no pending record."""
        result = await db.execute(
            _SETTLE_BY_REQUEST_SQL, {"request_id": request_id, "status": status.value}
        )
        row = result.fetchone()
        return _row_to_escrow(row) if row else None

    async def get_for_request(self, db: AsyncSession, request_id: str) -> EscrowPayment | None:
        result = await db.execute(_GET_BY_REQUEST_SQL, {"request_id": request_id})
        row = result.fetchone()
        return _row_to_escrow(row) if row else None

    async def list_for_payee(
        self, db: AsyncSession, user_id: str, limit: int = 100
    ) -> list[EscrowPayment]:
        result = await db.execute(_LIST_FOR_PAYEE_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_escrow(row) for row in result.fetchall()]
