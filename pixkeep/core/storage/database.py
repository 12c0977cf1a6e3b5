"""Database management using SQLAlchemy"""

import os
from pathlib import Path
from typing import Optional
from sqlalchemy import create_engine, text, Column, String, DateTime, LargeBinary, Integer, MetaData
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from loguru import logger

from ..errors import StoreInitializationError

Base = declarative_base()

DATABASE_FILE = 'ClipStorage.sqlite'


def default_shared_dir() -> Path:
    """Directory both front-ends can reach"""
    shared = os.environ.get('PIXKEEP_SHARED_DIR')
    if shared:
        return Path(shared)
    return Path(os.environ.get('APPDATA', '.')) / 'PixKeep'


class StoredImageDB(Base):
    """Database model for stored clipboard images"""
    __tablename__ = 'stored_images'

    pk = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), unique=True, nullable=False, index=True)
    image_data = Column(LargeBinary, nullable=False)
    expiration_date = Column(DateTime, nullable=False, index=True)


class DatabaseManager:
    """Manages a single SQLite file shared between processes"""

    def __init__(self, db_path: Optional[str] = None, metadata: MetaData = Base.metadata,
                 busy_timeout: float = 5.0):
        """
        Initialize database manager

        Args:
            db_path: Path to database file (defaults to the shared directory)
            metadata: Table metadata to create in this file
            busy_timeout: Seconds to wait for another process's write lock
        """
        if db_path is None:
            shared_dir = default_shared_dir()
            shared_dir.mkdir(parents=True, exist_ok=True)
            db_path = str(shared_dir / DATABASE_FILE)

        self.db_path = db_path
        self.metadata = metadata
        self.busy_timeout = busy_timeout
        self.engine = None
        self.SessionLocal = None

        self._initialize_database()

    def _initialize_database(self):
        """Initialize database connection and create tables"""
        try:
            self.engine = create_engine(
                f'sqlite:///{self.db_path}',
                connect_args={'check_same_thread': False, 'timeout': self.busy_timeout}
            )

            # Create tables if they don't exist
            self.metadata.create_all(bind=self.engine)

            self.SessionLocal = sessionmaker(
                autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
            )

            logger.info(f"Database initialized at: {self.db_path}")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            if self.engine is not None:
                self.engine.dispose()
            raise StoreInitializationError(self.db_path, e) from e

    def get_session(self) -> Session:
        """
        Get database session

        Returns:
            SQLAlchemy session
        """
        if self.SessionLocal is None:
            raise RuntimeError("Database not initialized")

        return self.SessionLocal()

    def close(self):
        """Close database connection"""
        if self.engine:
            self.engine.dispose()
            logger.info(f"Database connection closed: {self.db_path}")

    def vacuum(self):
        """Optimize database (VACUUM operation)"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("VACUUM"))
                conn.commit()
            logger.info("Database optimized (VACUUM completed)")

        except Exception as e:
            logger.error(f"VACUUM failed: {e}")
            raise

    def get_size(self) -> int:
        """
        Get database file size in bytes

        Returns:
            Size in bytes
        """
        if os.path.exists(self.db_path):
            return os.path.getsize(self.db_path)
        return 0
