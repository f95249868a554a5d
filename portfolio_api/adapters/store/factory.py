"""Factory for creating the configured document store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.adapters.store.in_memory import InMemoryDocumentStore
from portfolio_api.adapters.store.json_file import JsonFileDocumentStore
from portfolio_api.core.config import settings
from portfolio_api.core.errors import NotFoundAppError, ValidationAppError
from portfolio_api.schemas.profile import Profile

logger = logging.getLogger(__name__)


def create_document_store() -> AbstractDocumentStore:
    """Instantiate the store selected by ``APP_STORE_BACKEND``.

    Returns:
        AbstractDocumentStore: Configured store instance.

    Raises:
        ValidationAppError: If the backend name is unknown.
    """
    backend = settings.app.store_backend.lower()

    if backend == "memory":
        return InMemoryDocumentStore()

    if backend == "json_file":
        return JsonFileDocumentStore(settings.app.store_path)

    raise ValidationAppError(
        code="store_unknown_backend",
        message=f"Unknown store backend: '{backend}'. Supported backends: memory, json_file",
    )


def load_profile_seed(path: str | Path) -> Profile:
    """Read a profile document from a JSON seed file.

    Raises:
        ValidationAppError: If the file is missing or not a valid profile.
    """
    seed_path = Path(path)
    try:
        data = json.loads(seed_path.read_text(encoding="utf-8"))
        return Profile.model_validate(data)
    except (OSError, ValueError) as exc:
        raise ValidationAppError(
            code="profile_seed_invalid",
            message=f"Cannot load profile seed from {seed_path}: {exc}",
        ) from exc


async def seed_profile_if_missing(store: AbstractDocumentStore) -> bool:
    """Seed the profile singleton from ``APP_PROFILE_SEED_FILE`` when the store has none.

    Returns:
        True if a profile was written.
    """
    seed_file = settings.app.profile_seed_file
    if not seed_file:
        return False

    try:
        await store.get_profile()
        return False
    except NotFoundAppError:
        pass

    profile = await store.seed_profile(load_profile_seed(seed_file))
    logger.info("store.profile_seeded", extra={"seed_file": seed_file, "profile_name": profile.name})
    return True
