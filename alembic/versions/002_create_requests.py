"""002: create requests table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE requests (
            id                          VARCHAR(64)     PRIMARY KEY,
            owner_id                    UUID            NOT NULL REFERENCES users(id),
            title                       VARCHAR(200)    NOT NULL,
            description                 TEXT            NOT NULL DEFAULT '',
            budget                      BIGINT          NOT NULL,
            status                      VARCHAR(16)     NOT NULL DEFAULT 'Open',
            hired_photographer_id       UUID            REFERENCES users(id),
            accepted_bid_amount         BIGINT,
            booked_photographer_id      UUID            REFERENCES users(id),
            project_chat_room_id        VARCHAR(128),
            unread_bid_count            INTEGER         NOT NULL DEFAULT 0,
            dispute_resolution          VARCHAR(16),
            dispute_resolved_at         TIMESTAMPTZ,
            client_has_reviewed         BOOLEAN         NOT NULL DEFAULT FALSE,
            photographer_has_reviewed   BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_requests_status CHECK (status IN (
                'Pending', 'Open', 'In Progress', 'Delivered',
                'Disputed', 'Completed', 'Disabled'
            )),
            CONSTRAINT ck_requests_budget           CHECK (budget >= 0),
            CONSTRAINT ck_requests_accepted_amount  CHECK (accepted_bid_amount IS NULL OR accepted_bid_amount > 0),
            CONSTRAINT ck_requests_unread_bids      CHECK (unread_bid_count >= 0),
            CONSTRAINT ck_requests_resolution       CHECK (dispute_resolution IS NULL OR dispute_resolution IN ('refunded', 'paid')),
            -- hired photographer and accepted amount are set together or not at all
            CONSTRAINT ck_requests_hire_pair        CHECK ((hired_photographer_id IS NULL) = (accepted_bid_amount IS NULL))
        );
    """)
    op.execute("CREATE INDEX idx_requests_status_created ON requests (status, created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_requests_owner ON requests (owner_id, created_at DESC);")
    op.execute("CREATE INDEX idx_requests_hired ON requests (hired_photographer_id) WHERE hired_photographer_id IS NOT NULL;")
    op.execute("CREATE INDEX idx_requests_booked ON requests (booked_photographer_id) WHERE booked_photographer_id IS NOT NULL;")
    op.execute("""
        CREATE TRIGGER trg_requests_updated_at
            BEFORE UPDATE ON requests
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE requests IS 'Client photography requests and their lifecycle status';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS requests CASCADE;")
