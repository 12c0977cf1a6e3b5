"""Retention setting as edited from the settings screen"""

from loguru import logger

from ..core.expiry import MIN_RETENTION_DAYS, MAX_RETENTION_DAYS, effective_retention
from ..core.preferences import SharedPreferences


def validate_retention_days(days: int) -> int:
    """
    Check a retention length entered by the user

    Raises:
        ValueError: If the value is not an integer within 1..365 days
    """
    if isinstance(days, bool) or not isinstance(days, int):
        raise ValueError(f"Retention must be a whole number of days, got {days!r}")
    if not MIN_RETENTION_DAYS <= days <= MAX_RETENTION_DAYS:
        raise ValueError(
            f"Retention must be between {MIN_RETENTION_DAYS} and {MAX_RETENTION_DAYS} days, got {days}"
        )
    return days


class SettingsService:
    """Reads and writes the shared retention length"""

    def __init__(self, preferences: SharedPreferences):
        self.preferences = preferences

    def load_retention_days(self) -> int:
        """
        Read the retention length shown on the settings screen

        The effective value is written back so the other front-end reads an
        initialized setting too.
        """
        days = effective_retention(self.preferences.get_retention_days())
        self.preferences.set_retention_days(days)
        return days

    def update_retention_days(self, days: int) -> int:
        """Validate and store a new retention length"""
        validate_retention_days(days)
        self.preferences.set_retention_days(days)
        logger.info(f"Retention length set to {days} days")
        return days
