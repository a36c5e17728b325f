"""006: create payout_requests table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payout_requests (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         UUID            NOT NULL REFERENCES users(id),
            amount          BIGINT          NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'pending',
            requested_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            completed_at    TIMESTAMPTZ,
            transfer_id     VARCHAR(255),
            CONSTRAINT ck_payout_amount CHECK (amount > 0),
            CONSTRAINT ck_payout_status CHECK (status IN ('pending', 'completed'))
        );
    """)
    op.execute("""
        CREATE UNIQUE INDEX uq_payout_requests_pending_per_user
            ON payout_requests (user_id) WHERE status = 'pending';
    """)
    op.execute("CREATE INDEX idx_payout_requests_user ON payout_requests (user_id, requested_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payout_requests CASCADE;")
