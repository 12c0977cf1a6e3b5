"""Image clipboard backends"""

import io
import os
import ctypes
import threading
from typing import Optional
from PIL import Image, ImageGrab
from loguru import logger

from ..errors import ClipboardError


class ImageClipboard:
    """Clipboard capability the store client reads from and writes to"""

    def read_image(self) -> Optional[bytes]:
        """Return the clipboard image as encoded bytes, or None if there is none"""
        raise NotImplementedError

    def write_image(self, image_bytes: bytes) -> None:
        """Place an encoded image on the clipboard"""
        raise NotImplementedError


class MemoryClipboard(ImageClipboard):
    """In-process clipboard, used when no system clipboard is available"""

    def __init__(self, image_bytes: Optional[bytes] = None):
        self._content = image_bytes
        self._lock = threading.Lock()

    def read_image(self) -> Optional[bytes]:
        with self._lock:
            return self._content

    def write_image(self, image_bytes: bytes) -> None:
        with self._lock:
            self._content = bytes(image_bytes)

    def clear(self):
        with self._lock:
            self._content = None


class SystemClipboard(ImageClipboard):
    """Operating system clipboard backed by Pillow"""

    # CF_DIB expects the bitmap without its 14-byte file header
    BMP_FILE_HEADER_SIZE = 14
    CF_DIB = 8
    GMEM_MOVEABLE = 0x0002

    def __init__(self, image_format: str = 'PNG'):
        """
        Initialize system clipboard

        Args:
            image_format: Format images read from the clipboard are encoded to
        """
        self.image_format = image_format

    def read_image(self) -> Optional[bytes]:
        try:
            data = ImageGrab.grabclipboard()
        except (NotImplementedError, OSError) as e:
            logger.warning(f"Clipboard image unavailable: {e}")
            return None

        if not isinstance(data, Image.Image):
            return None

        buf = io.BytesIO()
        data.save(buf, format=self.image_format)
        return buf.getvalue()

    def write_image(self, image_bytes: bytes) -> None:
        if os.name != 'nt':
            raise ClipboardError("Writing images to the clipboard is only supported on Windows")

        try:
            img = Image.open(io.BytesIO(image_bytes)).convert('RGB')
        except OSError as e:
            raise ClipboardError(f"Cannot decode image: {e}") from e

        output = io.BytesIO()
        img.save(output, 'BMP')
        data = output.getvalue()[self.BMP_FILE_HEADER_SIZE:]
        output.close()

        self._set_clipboard_data(data)
        logger.debug(f"Copied {len(image_bytes)} byte image to clipboard")

    def _set_clipboard_data(self, data: bytes):
        user32 = ctypes.windll.user32
        kernel32 = ctypes.windll.kernel32

        if not user32.OpenClipboard(None):
            raise ClipboardError("Could not open clipboard")
        try:
            user32.EmptyClipboard()
            hglob = kernel32.GlobalAlloc(self.GMEM_MOVEABLE, len(data))
            if not hglob:
                raise ClipboardError("GlobalAlloc failed")
            lp = kernel32.GlobalLock(hglob)
            if not lp:
                raise ClipboardError("GlobalLock failed")
            ctypes.memmove(lp, data, len(data))
            kernel32.GlobalUnlock(hglob)
            # On success the clipboard owns the memory handle
            if not user32.SetClipboardData(self.CF_DIB, hglob):
                raise ClipboardError("SetClipboardData failed")
        finally:
            user32.CloseClipboard()
