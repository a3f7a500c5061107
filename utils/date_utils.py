"""
Recipe Share Date Utilities
Helpers for timestamps stored by the application
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC instant as a naive datetime, the form stored in every timestamp column"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def expiry_from(start: datetime, hours: int) -> datetime:
    """
    Get the instant a retention window of the given length closes

    Args:
        start: Window start
        hours: Window length in hours

    Returns:
        Naive UTC expiry instant
    """
    return as_naive_utc(start) + timedelta(hours=hours)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Check whether an optional expiry instant has passed"""
    if expires_at is None:
        return False
    return as_naive_utc(expires_at) < as_naive_utc(now or utcnow())
