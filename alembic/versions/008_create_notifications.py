"""008: create notifications table

Revision ID: 008
Revises: 007
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         UUID            NOT NULL REFERENCES users(id),
            type            VARCHAR(32)     NOT NULL,
            title           VARCHAR(200)    NOT NULL,
            message         TEXT            NOT NULL,
            link            VARCHAR(512),
            related_id      VARCHAR(255),
            is_read         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_notifications_user ON notifications (user_id, created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_notifications_unread ON notifications (user_id) WHERE is_read = FALSE;")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
