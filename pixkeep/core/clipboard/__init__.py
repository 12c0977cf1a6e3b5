"""Clipboard access for images"""

from .image_clipboard import ImageClipboard, MemoryClipboard, SystemClipboard

__all__ = ['ImageClipboard', 'MemoryClipboard', 'SystemClipboard']
