"""Data persistence and storage management"""

from .database import DatabaseManager
from .record import ImageRecord
from .repository import ImageStore

__all__ = ['DatabaseManager', 'ImageRecord', 'ImageStore']
