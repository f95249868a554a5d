"""Media storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredMedia:
    """Reference to a stored object.

    Attributes:
        path: Storage path relative to the media root (``folder/name``).
        url: Public URL clients use to fetch the object.
        content_type: MIME type recorded with the object.
        size: Stored size in bytes.
    """

    path: str
    url: str
    content_type: str
    size: int


class AbstractMediaStorage(ABC):
    """Interface for image storage backends."""

    @abstractmethod
    async def save(self, folder: str, filename: str, data: bytes, content_type: str) -> StoredMedia:
        """Persist ``data`` under ``folder`` and return its public reference.

        Implementations must not overwrite existing objects.
        """
        raise NotImplementedError
