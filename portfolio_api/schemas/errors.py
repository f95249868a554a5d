"""Uniform error body returned by every route."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable message.")
    code: str = Field(..., description="Stable machine-readable code.")
    timestamp: str = Field(..., description="ISO-8601 UTC time the error was produced.")
    details: Any | None = Field(None, description="Optional structured context.")
