"""Request-scoped dependencies shared by the route modules."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request

from portfolio_api.adapters.media.base import AbstractMediaStorage
from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.core.errors import validation_failed


def get_document_store(request: Request) -> AbstractDocumentStore:
    """Return the document store attached to the running application."""
    return request.app.state.document_store


def get_media_storage(request: Request) -> AbstractMediaStorage:
    """Return the media storage attached to the running application."""
    return request.app.state.media_storage


async def read_json_object(request: Request) -> dict[str, Any]:
    """Read the request body as a JSON object.

    Handlers call this after authorization so an unauthenticated caller never
    learns anything about body validation.

    Raises:
        ValidationAppError: If the body is empty, not JSON, or not an object.
    """
    raw = await request.body()
    if not raw.strip():
        raise validation_failed({"body": "Request body is required"})
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise validation_failed({"body": "Request body must be valid JSON"}) from None
    if not isinstance(payload, dict):
        raise validation_failed({"body": "Request body must be a JSON object"})
    return payload
