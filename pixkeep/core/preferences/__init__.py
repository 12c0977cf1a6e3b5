"""Cross-process preferences and change notification"""

from .channel import SharedPreferences, RETENTION_KEY, DIRTY_KEY

__all__ = ['SharedPreferences', 'RETENTION_KEY', 'DIRTY_KEY']
