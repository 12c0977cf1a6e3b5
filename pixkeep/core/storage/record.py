"""Image record entity shared by both front-ends"""

import uuid
from dataclasses import dataclass
from datetime import datetime


@dataclass
class ImageRecord:
    """Single stored clipboard image"""
    id: str
    image_bytes: bytes
    expires_at: datetime

    @staticmethod
    def new_id() -> str:
        """Generate a fresh record identifier"""
        return str(uuid.uuid4())

    @property
    def short_id(self) -> str:
        return self.id[:8]

    @property
    def size(self) -> int:
        return len(self.image_bytes)

    def __repr__(self):
        return f"ImageRecord(id={self.short_id}, size={self.size}, expires_at={self.expires_at.isoformat()})"
