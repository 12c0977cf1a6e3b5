"""Shared preferences stored in a small SQLite key/value file.

Both front-ends open the same file. It carries the retention length chosen in
the settings screen and the "needs refresh" flag one process raises after
changing the image store so the other re-reads it on its next activation.
"""

import json
import threading
from datetime import datetime
from typing import Any, Optional
from contextlib import contextmanager
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base
from loguru import logger

from ..errors import StorageError
from ..expiry import DEFAULT_RETENTION_DAYS
from ..storage.database import DatabaseManager, default_shared_dir

PreferencesBase = declarative_base()

PREFERENCES_FILE = 'preferences.sqlite'
RETENTION_KEY = 'expiration_length'
DIRTY_KEY = 'needs_refresh'


class PreferenceDB(PreferencesBase):
    """Database model for shared preferences"""
    __tablename__ = 'preferences'

    key = Column(String(100), primary_key=True)
    value = Column(Text)
    updated_at = Column(DateTime)


class SharedPreferences:
    """Typed accessors over the shared key/value area"""

    def __init__(self, database_manager: DatabaseManager):
        """
        Initialize shared preferences

        Args:
            database_manager: DatabaseManager opened with ``PreferencesBase.metadata``
        """
        self.db_manager = database_manager
        self._lock = threading.RLock()

    @classmethod
    def open(cls, db_path: Optional[str] = None, busy_timeout: float = 5.0) -> 'SharedPreferences':
        """Open (or create) the preferences file"""
        if db_path is None:
            shared_dir = default_shared_dir()
            shared_dir.mkdir(parents=True, exist_ok=True)
            db_path = str(shared_dir / PREFERENCES_FILE)

        manager = DatabaseManager(db_path, metadata=PreferencesBase.metadata, busy_timeout=busy_timeout)
        return cls(manager)

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
        finally:
            session.close()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get preference value

        Args:
            key: Preference key
            default: Default value if not found

        Returns:
            Stored value, or default when missing or unreadable
        """
        try:
            return self.read(key, default)

        except (StorageError, ValueError) as e:
            logger.error(f"Failed to read preference '{key}': {e}")
            return default

    def read(self, key: str, default: Any = None) -> Any:
        """
        Get preference value, raising on failure

        Raises:
            StorageError: If the preferences file cannot be read
            ValueError: If the stored value is not valid JSON
        """
        with self.get_session() as session:
            pref = session.query(PreferenceDB).filter_by(key=key).first()

            if pref is not None and pref.value is not None:
                return json.loads(pref.value)

            return default

    def set(self, key: str, value: Any):
        """
        Save preference value

        Args:
            key: Preference key
            value: JSON-serializable value
        """
        with self._lock:
            with self.get_session() as session:
                pref = session.query(PreferenceDB).filter_by(key=key).first()

                if pref is not None:
                    pref.value = json.dumps(value)
                    pref.updated_at = datetime.now()
                else:
                    session.add(PreferenceDB(
                        key=key,
                        value=json.dumps(value),
                        updated_at=datetime.now()
                    ))

        logger.debug(f"Saved preference: {key} = {value}")

    def get_retention_days(self) -> int:
        """
        Retention length in days, 30 when unset or unreadable as a number

        Raises:
            StorageError: If the preferences file cannot be read
        """
        try:
            value = self.read(RETENTION_KEY)
        except ValueError as e:
            logger.error(f"Stored retention length is corrupted: {e}")
            return DEFAULT_RETENTION_DAYS

        if isinstance(value, bool) or not isinstance(value, int):
            return DEFAULT_RETENTION_DAYS
        return value

    def set_retention_days(self, days: int):
        """Store the retention length; range checks belong to the settings screen"""
        self.set(RETENTION_KEY, int(days))

    def mark_dirty(self):
        """Tell the other front-end the image store changed"""
        self.set(DIRTY_KEY, True)

    def consume_dirty(self) -> bool:
        """
        Read and clear the change flag

        The flag is cleared with a conditional UPDATE, so of two concurrent
        callers only one observes True.

        Returns:
            True if the flag was set
        """
        with self._lock:
            with self.get_session() as session:
                cleared = session.query(PreferenceDB).filter(
                    PreferenceDB.key == DIRTY_KEY,
                    PreferenceDB.value == json.dumps(True)
                ).update(
                    {PreferenceDB.value: json.dumps(False), PreferenceDB.updated_at: datetime.now()},
                    synchronize_session=False
                )

        if cleared:
            logger.debug("Consumed refresh flag")
        return bool(cleared)

    def close(self):
        self.db_manager.close()
