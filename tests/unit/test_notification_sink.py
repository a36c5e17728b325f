"""Unit tests for the non-fatal notification sink and message payloads."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.sb_common.enums import DisputeResolution, NotificationType
from src.sb_notification.application.service import NotificationService, NotificationSink
from src.sb_notification.domain import messages
from src.sb_notification.domain.models import Notification
from src.sb_notification.infrastructure.persistence import NotificationRepository


def _session_factory(session: AsyncMock) -> MagicMock:
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=session)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=ctx)


class TestNotificationSink:
    async def test_writes_in_own_session(self) -> None:
        session = AsyncMock()
        repo = AsyncMock()
        sink = NotificationSink(session_factory=_session_factory(session), repo=repo)

        await sink.send("u1", messages.review_request("req-1"))

        args = repo.insert.await_args.args
        assert args[0] is session
        assert args[2] == "u1"
        assert args[3].type is NotificationType.REVIEW_REQUEST
        session.commit.assert_awaited_once()

    async def test_failure_is_logged_and_swallowed(self, caplog: pytest.LogCaptureFixture) -> None:
        session = AsyncMock()
        repo = AsyncMock()
        repo.insert.side_effect = RuntimeError("db down")
        sink = NotificationSink(session_factory=_session_factory(session), repo=repo)

        with caplog.at_level(logging.ERROR):
            await sink.send("u1", messages.review_request("req-1"))

        session.commit.assert_not_awaited()
        assert any("Notification failed" in r.message for r in caplog.records)

    async def test_empty_recipient_skipped(self) -> None:
        factory = MagicMock()
        sink = NotificationSink(session_factory=factory, repo=AsyncMock())

        await sink.send("", messages.review_request("req-1"))

        factory.assert_not_called()


class TestMessages:
    def test_bid_received_shows_amount(self) -> None:
        payload = messages.bid_received("req-1", "Wedding", 8000)
        assert payload.type is NotificationType.BID_RECEIVED
        assert "$80.00" in payload.message
        assert payload.related_id == "req-1"

    def test_dispute_resolved_names_outcome(self) -> None:
        payload = messages.dispute_resolved("req-1", "Wedding", DisputeResolution.REFUNDED)
        assert payload.type is NotificationType.DISPUTE_RESOLVED

    def test_direct_message_links_to_room(self) -> None:
        payload = messages.new_message("direct:a:b", None, False, "")
        assert payload.type is NotificationType.DIRECT_MESSAGE
        assert payload.link == "/messages/direct:a:b"
        assert "User" in payload.message


class TestNotificationService:
    async def test_unread_count(self) -> None:
        repo = AsyncMock()
        repo.count_unread.return_value = 1
        repo.list_for_user.return_value = [
            Notification("n1", "u1", "hired", "t", "m", "/", None, is_read=False),
            Notification("n2", "u1", "hired", "t", "m", "/", None, is_read=True),
        ]

        result = await NotificationService(repo=repo).list_notifications(
            AsyncMock(), "u1", unread_only=False, limit=50
        )

        assert len(result.items) == 2
        assert result.unread_count == 1

    async def test_unread_count_not_capped_by_page(self) -> None:
        repo = AsyncMock()
        repo.list_for_user.return_value = [
            Notification(f"n{i}", "u1", "hired", "t", "m", "/", None, is_read=False)
            for i in range(2)
        ]
        repo.count_unread.return_value = 75

        result = await NotificationService(repo=repo).list_notifications(
            AsyncMock(), "u1", unread_only=True, limit=2
        )

        assert len(result.items) == 2
        assert result.unread_count == 75
        repo.count_unread.assert_awaited_once()

    async def test_count_unread_query(self) -> None:
        db = AsyncMock()
        db.execute.return_value = MagicMock(scalar_one=MagicMock(return_value=3))

        count = await NotificationRepository().count_unread(db, "u1")

        assert count == 3
        sql = str(db.execute.await_args.args[0])
        assert "COUNT(*)" in sql
        assert "is_read = FALSE" in sql
        assert "LIMIT" not in sql
        assert db.execute.await_args.args[1] == {"user_id": "u1"}
