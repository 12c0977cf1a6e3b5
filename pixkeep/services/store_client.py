"""Store client: what a front-end uses to work with the shared image store"""

import threading
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from loguru import logger

from ..core.clipboard import ImageClipboard
from ..core.errors import StorageError
from ..core.expiry import days_left, effective_retention
from ..core.preferences import SharedPreferences
from ..core.storage import ImageStore, ImageRecord
from .cleanup_service import ExpiredImageCleaner

ListedImage = Tuple[ImageRecord, int]


class StoreClient:
    """Per front-end facade over the image store and shared preferences.

    The host app and the keyboard extension each build one. Every mutation
    raises the shared refresh flag; the other side notices it the next time
    it becomes active and calls ``sync_if_dirty``. Nothing is pushed across
    processes.
    """

    def __init__(self, store: ImageStore, preferences: SharedPreferences, clipboard: ImageClipboard,
                 clock: Callable[[], datetime] = datetime.now,
                 on_change: Optional[Callable[[], None]] = None,
                 on_refresh: Optional[Callable[[List[ListedImage]], None]] = None):
        """
        Initialize store client

        Args:
            store: Shared image store
            preferences: Shared preferences holding retention and refresh flag
            clipboard: Clipboard to read new images from and copy images to
            clock: Returns the current time
            on_change: Called after this client changed the store
            on_refresh: Called with the new listing when a sync re-read the store
        """
        self.store = store
        self.preferences = preferences
        self.clipboard = clipboard
        self.clock = clock
        self.on_change = on_change
        self.on_refresh = on_refresh
        self.items: List[ListedImage] = []
        self._lock = threading.RLock()

        self.purged_on_start = ExpiredImageCleaner(store, clock).cleanup()
        logger.info(f"StoreClient initialized ({self.purged_on_start} expired images removed)")

    def _retention_days(self) -> int:
        return effective_retention(self.preferences.get_retention_days())

    def _changed(self):
        # Store change is already committed here
        try:
            self.preferences.mark_dirty()
        except StorageError as e:
            logger.error(f"Failed to raise refresh flag: {e}")

        if self.on_change:
            try:
                self.on_change()
            except Exception as e:
                logger.error(f"Error in change callback: {e}")

    def add_from_external_source(self) -> Optional[ImageRecord]:
        """
        Save the image currently on the clipboard

        Returns:
            The stored record, or None if the clipboard holds no image
        """
        image_bytes = self.clipboard.read_image()
        if not image_bytes:
            logger.info("No image found in clipboard")
            return None

        record = self.store.create(image_bytes, self._retention_days(), self.clock())
        self._changed()

        logger.info(f"Image saved from clipboard: {record.short_id}")
        return record

    def list(self) -> List[ListedImage]:
        """
        Get active images with their remaining days

        Returns:
            (record, days_left) pairs, latest expiry first
        """
        now = self.clock()
        return [(record, days_left(record.expires_at, now)) for record in self.store.list_active(now)]

    def refresh(self) -> List[ListedImage]:
        """Re-read the store into ``items``"""
        items = self.list()
        with self._lock:
            self.items = items

        if self.on_refresh:
            try:
                self.on_refresh(items)
            except Exception as e:
                logger.error(f"Error in refresh callback: {e}")

        return items

    def use(self, record_id: str) -> bool:
        """
        Copy an image to the clipboard and reset its expiration

        Args:
            record_id: Id of the image to use

        Returns:
            True if the image was found and renewed
        """
        record = self.store.get(record_id)
        if record is None:
            logger.info(f"No stored image for id {record_id[:8]}")
            return False

        self.clipboard.write_image(record.image_bytes)

        renewed = self.store.renew(record_id, self._retention_days(), self.clock())
        if renewed is None:
            return False

        self._changed()
        logger.info(f"Image copied to clipboard: {renewed.short_id}")
        return True

    def remove(self, image_bytes: bytes) -> bool:
        """
        Delete the image whose payload matches

        Returns:
            True if an image was deleted
        """
        deleted = self.store.delete_by_payload(image_bytes)
        if deleted:
            self._changed()
        return deleted

    def remove_by_id(self, record_id: str) -> bool:
        """
        Delete an image by id

        Returns:
            True if an image was deleted
        """
        deleted = self.store.delete(record_id)
        if deleted:
            self._changed()
        return deleted

    def sync_if_dirty(self) -> Optional[List[ListedImage]]:
        """
        Re-read the store if the other front-end changed it

        Call when the front-end becomes active.

        Returns:
            The fresh listing, or None if nothing changed
        """
        if not self.preferences.consume_dirty():
            return None

        logger.debug("Store changed by another process, refreshing")
        return self.refresh()
