"""Pydantic schemas for the site owner's profile singleton."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import Field

from portfolio_api.schemas.common import CamelModel


class Profile(CamelModel):
    """The single profile document describing the site owner."""

    name: str
    title: str
    bio: str = ""
    email: str | None = None
    linkedin: str | None = None
    github: str | None = None
    twitter: str | None = None
    resume_url: str | None = Field(None, description="Reference to the downloadable résumé.")
    avatar: str | None = None
    skills: List[str] = Field(default_factory=list)
    experience: List[Dict[str, Any]] = Field(default_factory=list)
    updated_at: datetime | None = None


class ProfileUpdate(CamelModel):
    """Partial profile update; only fields explicitly set are applied."""

    name: str | None = None
    title: str | None = None
    bio: str | None = None
    email: str | None = None
    linkedin: str | None = None
    github: str | None = None
    twitter: str | None = None
    resume_url: str | None = None
    avatar: str | None = None
    skills: List[str] | None = None
    experience: List[Dict[str, Any]] | None = None


class ProfileResponse(CamelModel):
    profile: Profile
