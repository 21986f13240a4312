from __future__ import annotations

from typing import Optional, Protocol

from ..models import MediaFile


class MediaStorage(Protocol):
    """External object storage for uploaded images."""

    async def upload(self, media: MediaFile) -> Optional[str]:
        """Store ``media`` and return its public URL, or ``None`` on failure."""
        ...
