"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) and
lets tests inject their own store, media storage and clock.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from portfolio_api.adapters.media.base import AbstractMediaStorage
from portfolio_api.adapters.media.local import LocalMediaStorage
from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.adapters.store.factory import create_document_store, seed_profile_if_missing
from portfolio_api.api.routes import (
    admin_router,
    contact_router,
    health_router,
    profile_router,
    projects_router,
    uploads_router,
)
from portfolio_api.core.config import settings
from portfolio_api.core.exception_handlers import setup_exception_handlers
from portfolio_api.core.logging import configure_logging
from portfolio_api.core.middleware import cors_middleware, request_id_middleware
from portfolio_api.core.openapi import apply_openapi_customizations


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await seed_profile_if_missing(app.state.document_store)
    yield


def create_app(
    *,
    store: AbstractDocumentStore | None = None,
    media: AbstractMediaStorage | None = None,
    clock: Callable[[], float] = time.time,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        store: Document store to use; defaults to the configured backend.
        media: Media storage for uploads; defaults to local disk.
        clock: Time source shared with the contact rate limiter.
        configure_logs: Install the root logging configuration.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(settings.log)

    app = FastAPI(
        title="Portfolio API",
        description=(
            "Backend for a content-managed portfolio site: published projects, "
            "the owner's profile, a rate-limited contact form, and bearer-token "
            "protected content management."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.document_store = store or create_document_store()
    app.state.media_storage = media or LocalMediaStorage(
        Path(settings.app.media_root),
        base_url=settings.app.media_base_url,
    )
    app.state.clock = clock

    # Middleware (last registered runs first)
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(projects_router)
    app.include_router(profile_router)
    app.include_router(contact_router)
    app.include_router(admin_router)
    app.include_router(uploads_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
