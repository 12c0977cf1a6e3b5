"""Cleanup of expired images and database maintenance"""

from datetime import datetime
from typing import Callable
from loguru import logger

from ..core.errors import StorageError


class ExpiredImageCleaner:
    """Removes expired images at lifecycle points"""

    def __init__(self, store, clock: Callable[[], datetime] = datetime.now):
        """
        Initialize expired image cleaner

        Args:
            store: ImageStore instance
            clock: Returns the current time
        """
        self.store = store
        self.clock = clock

    def cleanup(self) -> int:
        """
        Purge expired images

        Failures are logged only: expired rows are already hidden from
        listings, and the next cleanup retries them.

        Returns:
            Number of images removed
        """
        try:
            return self.store.purge_expired(self.clock())

        except StorageError as e:
            logger.error(f"Failed to clean up expired images: {e}")
            return 0


class DatabaseOptimizer:
    """Optimizes database performance"""

    def __init__(self, database_manager):
        """
        Initialize database optimizer

        Args:
            database_manager: DatabaseManager instance
        """
        self.db_manager = database_manager

    def optimize(self) -> bool:
        """
        Optimize database

        Returns:
            True if successful
        """
        try:
            self.db_manager.vacuum()

            size_mb = self.db_manager.get_size() / (1024 * 1024)
            logger.info(f"Database optimized, current size: {size_mb:.2f} MB")

            return True

        except Exception as e:
            logger.error(f"Database optimization failed: {e}")
            return False
