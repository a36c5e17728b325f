"""UTC datetime utilities.

Timestamps reach the store adapters in several shapes (TIMESTAMPTZ values,
epoch millis from clients, ISO strings). `to_utc_datetime` is applied once at
that boundary so nothing deeper branches on the shape.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def to_utc_datetime(value: datetime | int | float | str | None) -> datetime | None:
    """Normalize a timestamp to an aware UTC datetime.

    int/float are epoch milliseconds. Naive datetimes are assumed UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, bool):
        raise TypeError("bool is not a timestamp")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        return to_utc_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")


def to_epoch_millis(value: datetime | None) -> int:
    """Sort key for optional timestamps; missing sorts as 0 (oldest)."""
    if value is None:
        return 0
    return int(value.timestamp() * 1000)
