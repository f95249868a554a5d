"""Media storage adapters for admin image uploads."""

from portfolio_api.adapters.media.base import AbstractMediaStorage, StoredMedia
from portfolio_api.adapters.media.local import LocalMediaStorage

__all__ = ["AbstractMediaStorage", "LocalMediaStorage", "StoredMedia"]
