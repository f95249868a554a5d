"""Shared pydantic configuration for wire models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys.

    Python code uses snake_case attributes; JSON bodies and stored documents
    use camelCase (``fullDescription``, ``createdAt``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """Dump to a JSON-safe dict keyed by wire names."""
        return self.model_dump(mode="json", by_alias=True)
