"""Tests for sb_common.id_generator and sb_common.datetime_utils."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from src.sb_common.datetime_utils import to_epoch_millis, to_utc_datetime, utc_now
from src.sb_common.id_generator import (
    SnowflakeIdGenerator,
    derived_id,
    direct_room_id,
    project_room_id,
    review_id,
)


class TestSnowflakeIdGenerator:
    def test_returns_str(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        assert isinstance(gen.next_id(), str)

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = int(gen.next_id())
        for _ in range(100):
            current = int(gen.next_id())
            assert current > prev
            prev = current

    def test_machine_id_range(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)


class TestDerivedIds:
    def test_project_room(self) -> None:
        assert project_room_id("req-1") == "project:req-1"

    def test_direct_room_is_order_independent(self) -> None:
        assert direct_room_id("u2", "u1") == direct_room_id("u1", "u2") == "direct:u1:u2"

    def test_review_id(self) -> None:
        assert review_id("req-1", "u1") == "req-1:u1"

    def test_derived_id_is_stable(self) -> None:
        first = derived_id("req", "pi_123")
        assert first == derived_id("req", "pi_123")
        assert first != derived_id("req", "pi_124")
        prefix, digest = first.split("_")
        assert prefix == "req"
        assert len(digest) == 20


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo is not None

    def test_is_utc(self) -> None:
        assert utc_now().tzinfo == UTC


class TestToUtcDatetime:
    def test_none(self) -> None:
        assert to_utc_datetime(None) is None

    def test_epoch_millis(self) -> None:
        assert to_utc_datetime(1_700_000_000_000) == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)

    def test_iso_string_with_z(self) -> None:
        assert to_utc_datetime("2025-03-01T12:00:00Z") == datetime(2025, 3, 1, 12, tzinfo=UTC)

    def test_naive_assumed_utc(self) -> None:
        result = to_utc_datetime(datetime(2025, 3, 1, 12))
        assert result is not None
        assert result.tzinfo == UTC
        assert result.hour == 12

    def test_other_offset_converted(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        result = to_utc_datetime(datetime(2025, 3, 1, 14, tzinfo=plus_two))
        assert result == datetime(2025, 3, 1, 12, tzinfo=UTC)
        assert result is not None and result.utcoffset() == timedelta(0)

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            to_utc_datetime(True)


class TestToEpochMillis:
    def test_missing_sorts_oldest(self) -> None:
        assert to_epoch_millis(None) == 0

    def test_whole_seconds(self) -> None:
        dt = datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
        assert to_epoch_millis(dt) == 1_700_000_000_000
