"""001: create timestamp trigger function and users table

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE users (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            username                VARCHAR(64)     NOT NULL,
            email                   VARCHAR(255)    NOT NULL,
            display_name            VARCHAR(128)    NOT NULL DEFAULT '',
            password_hash           VARCHAR(255)    NOT NULL,
            role                    VARCHAR(16)     NOT NULL DEFAULT 'user',
            is_active               BOOLEAN         NOT NULL DEFAULT TRUE,
            balance                 BIGINT          NOT NULL DEFAULT 0,
            unread_gigs_count       INTEGER         NOT NULL DEFAULT 0,
            pending_review_count    INTEGER         NOT NULL DEFAULT 0,
            is_accepting_requests   BOOLEAN         NOT NULL DEFAULT TRUE,
            payout_account_id       VARCHAR(64),
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username            UNIQUE (username),
            CONSTRAINT uq_users_email               UNIQUE (email),
            CONSTRAINT ck_users_username_len        CHECK (LENGTH(username) >= 3),
            CONSTRAINT ck_users_role                CHECK (role IN ('user', 'admin')),
            CONSTRAINT ck_users_balance             CHECK (balance >= 0),
            CONSTRAINT ck_users_unread_gigs         CHECK (unread_gigs_count >= 0),
            CONSTRAINT ck_users_pending_reviews     CHECK (pending_review_count >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_users_email ON users (email);")
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE users IS 'Accounts and profiles: identity, role, balance (cents), badges';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
