"""Expiry checks for short links."""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Return True if expires_at is set and now is strictly after it.

    Args:
        expires_at: Expiry timestamp, None means never expires
        now: Reference time (defaults to current UTC time)
    """
    if expires_at is None:
        return False
    now = as_utc(now) or utcnow()
    return now > as_utc(expires_at)


def expiry_from_days(days: int, now: Optional[datetime] = None) -> Optional[datetime]:
    """Expiry timestamp for a lifetime in days; 0 or less means never."""
    if days <= 0:
        return None
    return (as_utc(now) or utcnow()) + timedelta(days=days)


def cache_ttl_for(
    expires_at: Optional[datetime],
    default_ttl: int,
    now: Optional[datetime] = None,
) -> int:
    """TTL for a cache entry that must not outlive the record's expiry.

    Returns:
        Seconds to cache the mapping, 0 if it must not be cached
    """
    if expires_at is None:
        return default_ttl
    now = as_utc(now) or utcnow()
    remaining = (as_utc(expires_at) - now).total_seconds()
    if remaining <= 0:
        return 0
    return min(default_ttl, int(math.floor(remaining)))


def days_remaining(expires_at: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days until expiry, None when there is no expiry or it has passed."""
    if expires_at is None:
        return None
    now = as_utc(now) or utcnow()
    remaining = as_utc(expires_at) - now
    if remaining.total_seconds() < 0:
        return None
    return remaining.days
