"""Core storage, expiry and clipboard components"""

from .errors import PixKeepError, StorageError, StoreInitializationError, ClipboardError

__all__ = ['PixKeepError', 'StorageError', 'StoreInitializationError', 'ClipboardError']
