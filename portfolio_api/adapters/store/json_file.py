"""JSON snapshot document store.

Keeps the in-memory semantics and writes the whole dataset to a JSON file
after every mutation. Suitable for a single-process deployment with a small
amount of content; the snapshot is replaced atomically so a crash mid-write
leaves the previous version intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Callable

from portfolio_api.adapters.store.in_memory import InMemoryDocumentStore, _Entry
from portfolio_api.core.errors import StoreUnavailableError
from portfolio_api.schemas.inquiry import Inquiry
from portfolio_api.schemas.profile import Profile
from portfolio_api.schemas.project import Project

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class JsonFileDocumentStore(InMemoryDocumentStore):
    """In-memory store persisted to a JSON snapshot file.

    The snapshot is serialized and written synchronously while the store lock
    is held, blocking the event loop for the duration of the write. Mutations
    are rare admin or contact actions on a small dataset, so the write stays
    in the low milliseconds; a larger deployment should use a database-backed
    adapter instead. A failed write rolls the in-memory change back before
    ``StoreUnavailableError`` propagates.
    """

    def __init__(self, path: str | Path, *, clock: Callable[[], float] = time.time) -> None:
        """Load an existing snapshot from ``path`` if present.

        Raises:
            StoreUnavailableError: If the snapshot exists but cannot be read.
        """
        super().__init__(clock=clock)
        self._path = Path(path)
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.is_file():
            logger.info("store.snapshot_missing", extra={"path": str(self._path)})
            return

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            projects = [Project.model_validate(doc) for doc in data.get("projects", [])]
            inquiries = [Inquiry.model_validate(doc) for doc in data.get("inquiries", [])]
            profile = data.get("profile")
        except (OSError, ValueError) as exc:
            logger.error(
                "store.snapshot_unreadable",
                extra={"path": str(self._path), "error_type": type(exc).__name__},
            )
            raise StoreUnavailableError(
                code="STORE_UNAVAILABLE",
                message=f"Cannot read store snapshot at {self._path}",
            ) from exc

        # Snapshot lists are in insertion order
        for project in projects:
            self._projects[project.id] = _Entry(next(self._seq), project)
        for inquiry in inquiries:
            self._inquiries[inquiry.id] = _Entry(next(self._seq), inquiry)
        self._profile = Profile.model_validate(profile) if profile else None

        logger.info(
            "store.snapshot_loaded",
            extra={
                "path": str(self._path),
                "projects": len(projects),
                "inquiries": len(inquiries),
                "has_profile": self._profile is not None,
            },
        )

    def _snapshot(self) -> dict:
        def in_order(entries):
            return [entry.record.to_document() for entry in sorted(entries, key=lambda e: e.seq)]

        return {
            "version": SNAPSHOT_VERSION,
            "projects": in_order(self._projects.values()),
            "inquiries": in_order(self._inquiries.values()),
            "profile": self._profile.to_document() if self._profile else None,
        }

    def _after_write(self) -> None:
        payload = json.dumps(self._snapshot(), ensure_ascii=False, indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error(
                "store.snapshot_write_failed",
                extra={"path": str(self._path), "error_type": type(exc).__name__},
            )
            raise StoreUnavailableError(
                code="STORE_UNAVAILABLE",
                message=f"Cannot write store snapshot at {self._path}",
            ) from exc
