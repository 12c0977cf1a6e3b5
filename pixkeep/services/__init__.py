"""Application services"""

from .store_client import StoreClient
from .cleanup_service import ExpiredImageCleaner, DatabaseOptimizer
from .settings_service import SettingsService

__all__ = ['StoreClient', 'ExpiredImageCleaner', 'DatabaseOptimizer', 'SettingsService']
