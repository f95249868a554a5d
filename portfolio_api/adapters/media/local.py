"""Local filesystem media storage.

Files land under ``root/<folder>/<millis>-<name>``; the public URL is built
from a configurable base URL, so a reverse proxy or CDN can serve the
directory directly.
"""

from __future__ import annotations

import itertools
import logging
import time
from pathlib import Path
from typing import Callable, Iterator

from portfolio_api.adapters.media.base import AbstractMediaStorage, StoredMedia
from portfolio_api.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class LocalMediaStorage(AbstractMediaStorage):
    """Writes uploads to a directory on local disk."""

    def __init__(
        self,
        root: str | Path,
        *,
        base_url: str = "/media",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")
        self._clock = clock

    @property
    def root(self) -> Path:
        return self._root

    def _candidates(self, folder: str, filename: str) -> Iterator[Path]:
        # Millisecond prefix keeps names unique and roughly chronological
        stamp = int(self._clock() * 1000)
        yield self._root / folder / f"{stamp}-{filename}"
        for suffix in itertools.count(1):
            yield self._root / folder / f"{stamp}-{suffix}-{filename}"

    def _write_exclusive(self, folder: str, filename: str, data: bytes) -> Path:
        """Write ``data`` to the first free candidate name.

        Exclusive create claims the name atomically, so concurrent uploads of
        the same file in the same millisecond move on to the next suffix.
        """
        (self._root / folder).mkdir(parents=True, exist_ok=True)
        for candidate in self._candidates(folder, filename):
            try:
                with open(candidate, "xb") as handle:
                    handle.write(data)
            except FileExistsError:
                continue
            return candidate
        raise FileExistsError(f"No free name for {filename} in {folder}")

    async def save(self, folder: str, filename: str, data: bytes, content_type: str) -> StoredMedia:
        target = self._root / folder / filename
        try:
            target = self._write_exclusive(folder, filename, data)
        except OSError as exc:
            logger.error(
                "media.write_failed",
                extra={"media_path": str(target), "error_type": type(exc).__name__},
            )
            raise StoreUnavailableError(
                code="MEDIA_UNAVAILABLE",
                message=f"Cannot write media file {target}",
            ) from exc

        relative = target.relative_to(self._root).as_posix()
        logger.info(
            "media.saved",
            extra={"media_path": relative, "content_type": content_type, "size": len(data)},
        )
        return StoredMedia(
            path=relative,
            url=f"{self._base_url}/{relative}",
            content_type=content_type,
            size=len(data),
        )
