"""Expiry policy: pure functions over expiration timestamps

All timestamps are naive local datetimes. Adding a timedelta to a naive
datetime keeps the wall-clock time, so ``next_expiry`` lands on the same
time of day N calendar days later regardless of daylight-saving shifts.
"""

from datetime import datetime, timedelta
from typing import Optional

DEFAULT_RETENTION_DAYS = 30
MIN_RETENTION_DAYS = 1
MAX_RETENTION_DAYS = 365


def effective_retention(retention_days: Optional[int]) -> int:
    """
    Resolve the retention length actually applied

    Args:
        retention_days: Configured value, possibly unset or corrupted

    Returns:
        The configured value, the default when it is missing or not positive,
        or 365 when it exceeds the maximum
    """
    if retention_days is None or retention_days <= 0:
        return DEFAULT_RETENTION_DAYS
    return min(int(retention_days), MAX_RETENTION_DAYS)


def next_expiry(retention_days: Optional[int], now: datetime) -> datetime:
    """Expiration timestamp for an image saved or reused at ``now``"""
    return now + timedelta(days=effective_retention(retention_days))


def days_left(expires_at: datetime, now: datetime) -> int:
    """
    Whole days remaining before expiry

    Partial days round down, so an image expiring in 23 hours has 0 days left.
    """
    remaining = expires_at - now
    if remaining <= timedelta(0):
        return 0
    return remaining.days


def is_expired(expires_at: datetime, now: datetime) -> bool:
    """True once the expiration instant has been reached"""
    return expires_at <= now
