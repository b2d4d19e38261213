"""Utilities for datetime handling."""

from datetime import UTC, date, datetime, time


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso(dt: datetime) -> str:
    """Convert datetime to ISO format string."""
    return dt.isoformat()


def from_iso(value: str) -> datetime:
    """Parse ISO format string to datetime."""
    # Handle both 'Z' suffix and explicit timezone
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def to_utc_instant(value: str | date | datetime) -> datetime:
    """Normalize a date, datetime or ISO string to an aware UTC datetime.

    Naive values are taken to be UTC. A bare date maps to midnight UTC.
    """
    if isinstance(value, str):
        value = from_iso(value.strip())
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
