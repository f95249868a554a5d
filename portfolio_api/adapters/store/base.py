"""Document store interface.

Three logical record kinds live behind this interface: projects, inquiries
and the profile singleton. Implementations must guarantee read-after-write
for a single document; filtered listings may lag briefly on stores that
index asynchronously.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from portfolio_api.schemas.inquiry import ContactSubmission, Inquiry, InquiryUpdate
from portfolio_api.schemas.profile import Profile, ProfileUpdate
from portfolio_api.schemas.project import Project, ProjectCreate, ProjectUpdate


class AbstractDocumentStore(ABC):
    """Typed CRUD over projects, inquiries and the profile.

    Missing ids raise ``NotFoundAppError``; backend failures raise
    ``StoreUnavailableError``. Nothing is retried.
    """

    # Projects

    @abstractmethod
    async def list_projects(self, *, include_unpublished: bool = False) -> list[Project]:
        """Return projects ordered by ``createdAt`` descending.

        Args:
            include_unpublished: Admin reads pass True; public reads must not.
        """
        raise NotImplementedError

    async def list_published(self) -> list[Project]:
        """Public listing: published projects only, newest first."""
        return await self.list_projects(include_unpublished=False)

    @abstractmethod
    async def get_project(self, project_id: str, *, include_unpublished: bool = False) -> Project:
        """Fetch one project.

        On the public path an unpublished project is indistinguishable from a
        missing one: both raise ``NotFoundAppError``.
        """
        raise NotImplementedError

    @abstractmethod
    async def create_project(self, data: ProjectCreate) -> Project:
        """Store a new project, assigning its id and both timestamps."""
        raise NotImplementedError

    @abstractmethod
    async def update_project(self, project_id: str, patch: ProjectUpdate) -> Project:
        """Apply the fields set on ``patch`` and refresh ``updatedAt``."""
        raise NotImplementedError

    @abstractmethod
    async def delete_project(self, project_id: str) -> None:
        raise NotImplementedError

    # Profile

    @abstractmethod
    async def get_profile(self) -> Profile:
        raise NotImplementedError

    @abstractmethod
    async def update_profile(self, patch: ProfileUpdate) -> Profile:
        raise NotImplementedError

    @abstractmethod
    async def seed_profile(self, profile: Profile) -> Profile:
        """Create or replace the profile singleton (bootstrap only)."""
        raise NotImplementedError

    # Inquiries

    @abstractmethod
    async def create_inquiry(self, submission: ContactSubmission, origin: str) -> Inquiry:
        """Append a new inquiry with a server-assigned id and timestamp."""
        raise NotImplementedError

    @abstractmethod
    async def list_inquiries(self) -> list[Inquiry]:
        raise NotImplementedError

    @abstractmethod
    async def get_inquiry(self, inquiry_id: str) -> Inquiry:
        raise NotImplementedError

    @abstractmethod
    async def update_inquiry(self, inquiry_id: str, patch: InquiryUpdate) -> Inquiry:
        """Change the admin flags (``read``/``replied``) of an inquiry."""
        raise NotImplementedError

    @abstractmethod
    async def delete_inquiry(self, inquiry_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def count_recent_inquiries(self, origin: str, window_start: datetime) -> int:
        """Count inquiries from ``origin`` created strictly after ``window_start``."""
        raise NotImplementedError

    @abstractmethod
    async def oldest_recent_inquiry_at(self, origin: str, window_start: datetime) -> datetime | None:
        """Creation time of the oldest inquiry from ``origin`` still in the window."""
        raise NotImplementedError
