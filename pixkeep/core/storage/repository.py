"""Repository for the shared expiring-image store"""

from typing import List, Optional
from datetime import datetime
from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from loguru import logger

from .database import StoredImageDB, DatabaseManager
from .record import ImageRecord
from ..errors import StorageError
from ..expiry import next_expiry


class ImageStore:
    """CRUD and query operations over stored images.

    Every public method runs in its own transaction: it either commits as a
    whole or rolls back and raises ``StorageError``. SQLite's write lock
    serializes writers from the host app and the extension.
    """

    def __init__(self, database_manager: DatabaseManager):
        """
        Initialize repository

        Args:
            database_manager: DatabaseManager instance for the image database
        """
        self.db_manager = database_manager

    @contextmanager
    def get_session(self):
        """Get a new database session with proper cleanup"""
        session = self.db_manager.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _to_record(row: StoredImageDB) -> ImageRecord:
        return ImageRecord(id=row.uuid, image_bytes=row.image_data, expires_at=row.expiration_date)

    def create(self, image_bytes: bytes, retention_days: int, now: Optional[datetime] = None) -> ImageRecord:
        """
        Persist a new image

        Args:
            image_bytes: Encoded image payload
            retention_days: Days until the image expires
            now: Creation time (defaults to the current time)

        Returns:
            The stored record

        Raises:
            StorageError: If the write fails; nothing is stored in that case
        """
        if not image_bytes:
            raise ValueError("image_bytes must not be empty")

        if now is None:
            now = datetime.now()

        record = ImageRecord(
            id=ImageRecord.new_id(),
            image_bytes=bytes(image_bytes),
            expires_at=next_expiry(retention_days, now)
        )

        try:
            with self.get_session() as session:
                session.add(StoredImageDB(
                    uuid=record.id,
                    image_data=record.image_bytes,
                    expiration_date=record.expires_at
                ))
        except StorageError as e:
            logger.error(f"Failed to save image: {e}")
            raise

        logger.debug(f"Saved new image: {record.short_id} ({record.size} bytes, expires {record.expires_at})")
        return record

    def get(self, record_id: str) -> Optional[ImageRecord]:
        """Look up a record by id, expired or not"""
        with self.get_session() as session:
            row = session.query(StoredImageDB).filter_by(uuid=record_id).first()
            return self._to_record(row) if row else None

    def list_active(self, now: datetime) -> List[ImageRecord]:
        """
        Get images that have not expired

        Args:
            now: Reference time

        Returns:
            Records with ``expires_at >= now``, latest expiry first
        """
        try:
            with self.get_session() as session:
                rows = session.query(StoredImageDB).filter(
                    StoredImageDB.expiration_date >= now
                ).order_by(StoredImageDB.expiration_date.desc(), StoredImageDB.pk.desc()).all()

                return [self._to_record(row) for row in rows]

        except StorageError as e:
            logger.error(f"Failed to fetch stored images: {e}")
            raise

    def renew(self, record_id: str, retention_days: int, now: datetime) -> Optional[ImageRecord]:
        """
        Reset the expiration of an image

        Args:
            record_id: Id of the image to renew
            retention_days: Days until the image expires again
            now: Time of reuse

        Returns:
            The updated record, or None if no image has this id
        """
        expires_at = next_expiry(retention_days, now)

        try:
            with self.get_session() as session:
                row = session.query(StoredImageDB).filter_by(uuid=record_id).first()

                if row is None:
                    logger.debug(f"No stored image found for id {record_id[:8]}")
                    return None

                row.expiration_date = expires_at
                record = self._to_record(row)

        except StorageError as e:
            logger.error(f"Failed to reset expiration: {e}")
            raise

        logger.debug(f"Expiration reset for {record.short_id} -> {expires_at}")
        return record

    def delete(self, record_id: str) -> bool:
        """
        Delete image by id

        Returns:
            True if an image was deleted
        """
        try:
            with self.get_session() as session:
                deleted = session.query(StoredImageDB).filter_by(uuid=record_id).delete()

        except StorageError as e:
            logger.error(f"Failed to delete image: {e}")
            raise

        if deleted:
            logger.debug(f"Deleted image: {record_id[:8]}")
        return bool(deleted)

    def delete_by_payload(self, image_bytes: bytes) -> bool:
        """
        Delete the first image whose payload matches byte-for-byte

        Args:
            image_bytes: Payload to match

        Returns:
            True if a match was found and deleted
        """
        try:
            with self.get_session() as session:
                row = session.query(StoredImageDB).filter(
                    StoredImageDB.image_data == bytes(image_bytes)
                ).order_by(StoredImageDB.expiration_date.desc(), StoredImageDB.pk.desc()).first()

                if row is None:
                    return False

                record_id = row.uuid
                session.delete(row)

        except StorageError as e:
            logger.error(f"Failed to delete image: {e}")
            raise

        logger.debug(f"Deleted image by payload: {record_id[:8]}")
        return True

    def purge_expired(self, now: datetime) -> int:
        """
        Delete images whose expiration has passed

        Args:
            now: Reference time

        Returns:
            Number of images deleted
        """
        try:
            with self.get_session() as session:
                deleted = session.query(StoredImageDB).filter(
                    StoredImageDB.expiration_date < now
                ).delete(synchronize_session=False)

        except StorageError as e:
            logger.error(f"Failed to remove expired images: {e}")
            raise

        if deleted:
            logger.info(f"Removed {deleted} expired images")
        return deleted

    def count(self) -> int:
        """Get total number of stored images, expired ones included"""
        with self.get_session() as session:
            return session.query(StoredImageDB).count()

    def clear_all(self) -> int:
        """
        Delete every stored image

        Returns:
            Number of images deleted
        """
        with self.get_session() as session:
            deleted = session.query(StoredImageDB).delete()

        logger.info(f"Cleared {deleted} images from database")
        return deleted
