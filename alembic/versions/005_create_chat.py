"""005: create chat_rooms and chat_messages tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE chat_rooms (
            id                      VARCHAR(128)    PRIMARY KEY,
            user1_id                UUID            NOT NULL REFERENCES users(id),
            user2_id                UUID            NOT NULL REFERENCES users(id),
            request_id              VARCHAR(64)     REFERENCES requests(id),
            is_project_chat         BOOLEAN         NOT NULL DEFAULT FALSE,
            last_message_text       TEXT,
            last_message_at         TIMESTAMPTZ,
            last_message_sender_id  UUID,
            has_unread              JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_chat_rooms_distinct   CHECK (user1_id <> user2_id),
            CONSTRAINT ck_chat_rooms_project    CHECK (NOT is_project_chat OR request_id IS NOT NULL)
        );
    """)
    op.execute("CREATE INDEX idx_chat_rooms_user1 ON chat_rooms (user1_id);")
    op.execute("CREATE INDEX idx_chat_rooms_user2 ON chat_rooms (user2_id);")
    op.execute("CREATE INDEX idx_chat_rooms_last_message ON chat_rooms (last_message_at DESC NULLS LAST);")

    op.execute("""
        CREATE TABLE chat_messages (
            id          VARCHAR(64)     PRIMARY KEY,
            room_id     VARCHAR(128)    NOT NULL REFERENCES chat_rooms(id),
            sender_id   UUID            NOT NULL REFERENCES users(id),
            text        TEXT            NOT NULL DEFAULT '',
            media_url   VARCHAR(2048),
            media_type  VARCHAR(16),
            media_name  VARCHAR(255),
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_chat_messages_media_type CHECK (media_type IS NULL OR media_type IN ('image', 'video')),
            CONSTRAINT ck_chat_messages_not_empty CHECK (text <> '' OR media_url IS NOT NULL)
        );
    """)
    op.execute("CREATE INDEX idx_chat_messages_room ON chat_messages (room_id, created_at, id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS chat_messages CASCADE;")
    op.execute("DROP TABLE IF EXISTS chat_rooms CASCADE;")
