"""In-memory document store.

Notes:
- Per-process only: every worker holds its own copy of the data.
- Thread-safe: uses a lock around shared state.
- Returned records are copies, so callers cannot mutate stored documents.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel

from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.core.errors import StoreUnavailableError, not_found
from portfolio_api.schemas.inquiry import ContactSubmission, Inquiry, InquiryUpdate
from portfolio_api.schemas.profile import Profile, ProfileUpdate
from portfolio_api.schemas.project import Project, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass
class _Entry(Generic[RecordT]):
    seq: int
    record: RecordT


def _new_id() -> str:
    return uuid.uuid4().hex[:20]


class InMemoryDocumentStore(AbstractDocumentStore):
    """Document store backed by plain dicts.

    Useful for tests and single-process deployments. Reads always observe the
    latest write, so toggling ``published`` is visible to the very next
    listing.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize an empty store.

        Args:
            clock: Time source returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._seq = itertools.count()
        self._projects: dict[str, _Entry[Project]] = {}
        self._inquiries: dict[str, _Entry[Inquiry]] = {}
        self._profile: Profile | None = None

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def _after_write(self) -> None:
        """Hook for subclasses that persist state after a mutation."""

    def _commit(self, undo: Callable[[], None]) -> None:
        """Persist the mutation just applied, reverting it with ``undo`` on failure.

        Must be called with the lock held, so no reader observes a change
        that is later rolled back.

        Raises:
            StoreUnavailableError: Re-raised after the in-memory state is restored.
        """
        try:
            self._after_write()
        except StoreUnavailableError:
            undo()
            raise

    @staticmethod
    def _newest_first(entries) -> list:
        ordered = sorted(
            entries,
            key=lambda entry: (entry.record.created_at, entry.seq),
            reverse=True,
        )
        return [entry.record.model_copy(deep=True) for entry in ordered]

    # Projects

    async def list_projects(self, *, include_unpublished: bool = False) -> list[Project]:
        with self._lock:
            entries = [
                entry
                for entry in self._projects.values()
                if include_unpublished or entry.record.published
            ]
            return self._newest_first(entries)

    async def get_project(self, project_id: str, *, include_unpublished: bool = False) -> Project:
        with self._lock:
            entry = self._projects.get(project_id)
            if entry is None or not (include_unpublished or entry.record.published):
                raise not_found("Project")
            return entry.record.model_copy(deep=True)

    async def create_project(self, data: ProjectCreate) -> Project:
        now = self._now()
        project = Project(
            **data.model_dump(),
            id=_new_id(),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._projects[project.id] = _Entry(next(self._seq), project)
            self._commit(lambda: self._projects.pop(project.id, None))
        logger.info(
            "store.project_created",
            extra={"project_id": project.id, "published": project.published},
        )
        return project.model_copy(deep=True)

    async def update_project(self, project_id: str, patch: ProjectUpdate) -> Project:
        changes = patch.model_dump(exclude_unset=True)
        with self._lock:
            entry = self._projects.get(project_id)
            if entry is None:
                raise not_found("Project")
            previous = entry.record
            entry.record = entry.record.model_copy(
                update={**changes, "updated_at": self._now()},
                deep=True,
            )
            self._commit(lambda: setattr(entry, "record", previous))
            updated = entry.record.model_copy(deep=True)
        logger.info(
            "store.project_updated",
            extra={"project_id": project_id, "changed_fields": sorted(changes)},
        )
        return updated

    async def delete_project(self, project_id: str) -> None:
        with self._lock:
            removed = self._projects.pop(project_id, None)
            if removed is None:
                raise not_found("Project")
            self._commit(lambda: self._projects.__setitem__(project_id, removed))
        logger.info("store.project_deleted", extra={"project_id": project_id})

    # Profile

    async def get_profile(self) -> Profile:
        with self._lock:
            if self._profile is None:
                raise not_found("Profile")
            return self._profile.model_copy(deep=True)

    async def update_profile(self, patch: ProfileUpdate) -> Profile:
        changes = patch.model_dump(exclude_unset=True)
        with self._lock:
            if self._profile is None:
                raise not_found("Profile")
            previous = self._profile
            self._profile = self._profile.model_copy(
                update={**changes, "updated_at": self._now()},
                deep=True,
            )
            self._commit(lambda: setattr(self, "_profile", previous))
            profile = self._profile.model_copy(deep=True)
        logger.info("store.profile_updated", extra={"changed_fields": sorted(changes)})
        return profile

    async def seed_profile(self, profile: Profile) -> Profile:
        seeded = profile.model_copy(update={"updated_at": profile.updated_at or self._now()}, deep=True)
        with self._lock:
            previous = self._profile
            self._profile = seeded
            self._commit(lambda: setattr(self, "_profile", previous))
        return seeded.model_copy(deep=True)

    # Inquiries

    async def create_inquiry(self, submission: ContactSubmission, origin: str) -> Inquiry:
        inquiry = Inquiry(
            **submission.model_dump(),
            id=_new_id(),
            origin=origin,
            created_at=self._now(),
            read=False,
            replied=False,
        )
        with self._lock:
            self._inquiries[inquiry.id] = _Entry(next(self._seq), inquiry)
            self._commit(lambda: self._inquiries.pop(inquiry.id, None))
        return inquiry.model_copy(deep=True)

    async def list_inquiries(self) -> list[Inquiry]:
        with self._lock:
            return self._newest_first(self._inquiries.values())

    async def get_inquiry(self, inquiry_id: str) -> Inquiry:
        with self._lock:
            entry = self._inquiries.get(inquiry_id)
            if entry is None:
                raise not_found("Inquiry")
            return entry.record.model_copy(deep=True)

    async def update_inquiry(self, inquiry_id: str, patch: InquiryUpdate) -> Inquiry:
        # InquiryUpdate only carries the admin flags, so sender fields stay untouched
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        with self._lock:
            entry = self._inquiries.get(inquiry_id)
            if entry is None:
                raise not_found("Inquiry")
            previous = entry.record
            entry.record = entry.record.model_copy(update=changes, deep=True)
            self._commit(lambda: setattr(entry, "record", previous))
            return entry.record.model_copy(deep=True)

    async def delete_inquiry(self, inquiry_id: str) -> None:
        with self._lock:
            removed = self._inquiries.pop(inquiry_id, None)
            if removed is None:
                raise not_found("Inquiry")
            self._commit(lambda: self._inquiries.__setitem__(inquiry_id, removed))

    def _recent_from(self, origin: str, window_start: datetime) -> list[Inquiry]:
        return [
            entry.record
            for entry in self._inquiries.values()
            if entry.record.origin == origin and entry.record.created_at > window_start
        ]

    async def count_recent_inquiries(self, origin: str, window_start: datetime) -> int:
        with self._lock:
            return len(self._recent_from(origin, window_start))

    async def oldest_recent_inquiry_at(self, origin: str, window_start: datetime) -> datetime | None:
        with self._lock:
            recent = self._recent_from(origin, window_start)
            return min((inquiry.created_at for inquiry in recent), default=None)
