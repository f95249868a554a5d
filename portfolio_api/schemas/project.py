"""Pydantic schemas for portfolio projects (content items)."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import Field

from portfolio_api.schemas.common import CamelModel


class ProjectCreate(CamelModel):
    """Validated payload for creating a project."""

    title: str
    description: str = Field(..., description="Short description shown in listings.")
    full_description: str = Field(..., description="Long-form description for the detail page.")
    thumbnail: str = Field(..., description="Media reference used as the listing image.")
    images: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    category: str
    live_url: str | None = None
    github_url: str | None = None
    featured: bool = False
    published: bool = False
    order: int = 0


class ProjectUpdate(CamelModel):
    """Partial project update; only fields explicitly set are applied."""

    title: str | None = None
    description: str | None = None
    full_description: str | None = None
    thumbnail: str | None = None
    images: List[str] | None = None
    technologies: List[str] | None = None
    category: str | None = None
    live_url: str | None = None
    github_url: str | None = None
    featured: bool | None = None
    published: bool | None = None
    order: int | None = None


class Project(ProjectCreate):
    """A stored project as returned by the API."""

    id: str
    created_at: datetime
    updated_at: datetime


class ProjectListResponse(CamelModel):
    projects: List[Project]


class ProjectResponse(CamelModel):
    project: Project


class DeleteResponse(CamelModel):
    success: bool = True
    id: str
