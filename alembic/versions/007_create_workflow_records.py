"""007: create content_deliveries, reports and reviews tables

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE content_deliveries (
            id                  VARCHAR(64)     PRIMARY KEY,
            request_id          VARCHAR(64)     NOT NULL REFERENCES requests(id),
            photographer_id     UUID            NOT NULL REFERENCES users(id),
            files               JSONB           NOT NULL DEFAULT '[]'::jsonb,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_content_deliveries_request ON content_deliveries (request_id, created_at);")

    op.execute("""
        CREATE TABLE reports (
            id                  VARCHAR(64)     PRIMARY KEY,
            request_id          VARCHAR(64)     NOT NULL REFERENCES requests(id),
            reporter_id         UUID            NOT NULL REFERENCES users(id),
            reported_user_id    UUID            REFERENCES users(id),
            reason              VARCHAR(200)    NOT NULL,
            details             TEXT            NOT NULL DEFAULT '',
            is_dispute          BOOLEAN         NOT NULL DEFAULT FALSE,
            status              VARCHAR(16)     NOT NULL DEFAULT 'open',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            resolved_at         TIMESTAMPTZ,
            CONSTRAINT ck_reports_status CHECK (status IN ('open', 'resolved'))
        );
    """)
    op.execute("CREATE INDEX idx_reports_open_disputes ON reports (created_at) WHERE is_dispute AND status = 'open';")
    op.execute("CREATE INDEX idx_reports_request ON reports (request_id);")

    op.execute("""
        CREATE TABLE reviews (
            id              VARCHAR(200)    PRIMARY KEY,
            request_id      VARCHAR(64)     NOT NULL REFERENCES requests(id),
            reviewer_id     UUID            NOT NULL REFERENCES users(id),
            reviewee_id     UUID            NOT NULL REFERENCES users(id),
            rating          SMALLINT        NOT NULL,
            comment         TEXT            NOT NULL DEFAULT '',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_reviews_rating CHECK (rating BETWEEN 1 AND 5),
            CONSTRAINT uq_reviews_request_reviewer UNIQUE (request_id, reviewer_id)
        );
    """)
    op.execute("CREATE INDEX idx_reviews_reviewee ON reviews (reviewee_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS reviews CASCADE;")
    op.execute("DROP TABLE IF EXISTS reports CASCADE;")
    op.execute("DROP TABLE IF EXISTS content_deliveries CASCADE;")
