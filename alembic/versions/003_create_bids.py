"""003: create bids table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bids (
            id                  VARCHAR(64)     PRIMARY KEY,
            request_id          VARCHAR(64)     NOT NULL REFERENCES requests(id),
            user_id             UUID            NOT NULL REFERENCES users(id),
            request_owner_id    UUID            NOT NULL REFERENCES users(id),
            amount              BIGINT          NOT NULL,
            note                TEXT            NOT NULL DEFAULT '',
            status              VARCHAR(16)     NOT NULL DEFAULT 'active',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bids_amount   CHECK (amount > 0),
            CONSTRAINT ck_bids_status   CHECK (status IN ('active', 'cancelled')),
            CONSTRAINT ck_bids_not_self CHECK (user_id <> request_owner_id)
        );
    """)
    # One active bid per (request, bidder); cancelled bids do not count
    op.execute("""
        CREATE UNIQUE INDEX uq_bids_active_per_user
            ON bids (request_id, user_id) WHERE status = 'active';
    """)
    op.execute("CREATE INDEX idx_bids_request ON bids (request_id, created_at DESC);")
    op.execute("CREATE INDEX idx_bids_user ON bids (user_id, created_at DESC);")
    op.execute("COMMENT ON TABLE bids IS 'Photographer bids on open requests; amount immutable';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
