"""Datetime utilities for persistence layer."""

from datetime import datetime, timezone


def normalize_to_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime.

    SQLite stores datetimes without timezone info, so naive values read
    back from the archive are treated as UTC.

    Args:
        dt: datetime to process

    Returns:
        timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_storage(dt: datetime) -> datetime:
    """Convert a datetime to the naive UTC form it is stored in."""
    return normalize_to_utc(dt).replace(tzinfo=None)
