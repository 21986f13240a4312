from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class MediaFile:
    """An uploaded file, detached from the transport that delivered it."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.content
