"""Expiry computation for stored images"""

from .policy import (
    DEFAULT_RETENTION_DAYS, MIN_RETENTION_DAYS, MAX_RETENTION_DAYS,
    days_left, is_expired, next_expiry, effective_retention
)

__all__ = [
    'DEFAULT_RETENTION_DAYS', 'MIN_RETENTION_DAYS', 'MAX_RETENTION_DAYS',
    'days_left', 'is_expired', 'next_expiry', 'effective_retention'
]
