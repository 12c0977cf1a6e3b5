"""Exception hierarchy for PixKeep"""


class PixKeepError(Exception):
    """Base class for all PixKeep errors"""


class StorageError(PixKeepError):
    """Raised when a read or write against the shared store fails.

    The failed operation is rolled back, so no partial write is visible.
    """


class StoreInitializationError(StorageError):
    """Raised when the storage engine cannot be opened at startup"""

    def __init__(self, path: str, reason: Exception):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not open store at {path}: {reason}")


class ClipboardError(PixKeepError):
    """Raised when the clipboard rejects an image"""
