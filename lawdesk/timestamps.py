"""
LawDesk - Timestamp Utilities

All timestamps stored in the database are naive UTC.
"""

from datetime import datetime, timezone, timedelta


def now_utc() -> datetime:
    """Return the current time as naive UTC (compatible with database datetimes)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def days_ago(days: int, now: datetime = None) -> datetime:
    """Naive UTC cutoff `days` before `now` (defaults to the current time)."""
    return (now or now_utc()) - timedelta(days=days)
