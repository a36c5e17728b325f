"""009: report contexts (user or request) and favorites

Revision ID: 009
Revises: 008
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # A report is about a user or about a request; only request reports carry request_id
    op.execute("ALTER TABLE reports ALTER COLUMN request_id DROP NOT NULL;")
    op.execute("ALTER TABLE reports ADD COLUMN context_type VARCHAR(16) NOT NULL DEFAULT 'request';")
    op.execute("ALTER TABLE reports ADD COLUMN context_id VARCHAR(64);")
    op.execute("UPDATE reports SET context_id = request_id WHERE context_id IS NULL;")
    op.execute("ALTER TABLE reports ALTER COLUMN context_id SET NOT NULL;")
    op.execute("""
        ALTER TABLE reports
            ADD CONSTRAINT ck_reports_context_type CHECK (context_type IN ('user', 'request')),
            ADD CONSTRAINT ck_reports_request_context
                CHECK (context_type <> 'request' OR request_id = context_id),
            ADD CONSTRAINT ck_reports_dispute_on_request
                CHECK (NOT is_dispute OR context_type = 'request');
    """)
    op.execute("CREATE INDEX idx_reports_open ON reports (created_at DESC) WHERE status = 'open';")

    op.execute("""
        CREATE TABLE favorites (
            user_id         UUID            NOT NULL REFERENCES users(id),
            item_type       VARCHAR(16)     NOT NULL,
            item_id         VARCHAR(64)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, item_type, item_id),
            CONSTRAINT ck_favorites_item_type CHECK (item_type IN ('photographer', 'request'))
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS favorites CASCADE;")
    op.execute("DROP INDEX IF EXISTS idx_reports_open;")
    op.execute("DELETE FROM reports WHERE request_id IS NULL;")
    op.execute("""
        ALTER TABLE reports
            DROP CONSTRAINT IF EXISTS ck_reports_dispute_on_request,
            DROP CONSTRAINT IF EXISTS ck_reports_request_context,
            DROP CONSTRAINT IF EXISTS ck_reports_context_type,
            DROP COLUMN IF EXISTS context_id,
            DROP COLUMN IF EXISTS context_type;
    """)
    op.execute("ALTER TABLE reports ALTER COLUMN request_id SET NOT NULL;")
