"""Pydantic schemas for admin image uploads."""

from __future__ import annotations

from pydantic import Field

from portfolio_api.schemas.common import CamelModel


class UploadResponse(CamelModel):
    """Storage reference for an uploaded image."""

    url: str = Field(..., description="Public URL of the stored image.")
    path: str = Field(..., description="Storage path relative to the media root.")
    content_type: str
    size: int = Field(..., description="Stored size in bytes.")
    message: str = "Image uploaded successfully"
