"""004: create escrow_payments table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE escrow_payments (
            id              VARCHAR(255)    PRIMARY KEY,
            request_id      VARCHAR(64)     NOT NULL REFERENCES requests(id),
            payer_id        UUID            NOT NULL REFERENCES users(id),
            payee_id        UUID            NOT NULL REFERENCES users(id),
            amount          BIGINT          NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'pending',
            payment_date    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            release_date    TIMESTAMPTZ,
            CONSTRAINT ck_escrow_amount CHECK (amount > 0),
            CONSTRAINT ck_escrow_status CHECK (status IN ('pending', 'released', 'refunded'))
        );
    """)
    op.execute("CREATE INDEX idx_escrow_request ON escrow_payments (request_id);")
    op.execute("CREATE INDEX idx_escrow_payee ON escrow_payments (payee_id, payment_date DESC);")
    op.execute("COMMENT ON TABLE escrow_payments IS 'Held client payments keyed by payment reference';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS escrow_payments CASCADE;")
