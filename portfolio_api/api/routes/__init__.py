from __future__ import annotations

from portfolio_api.api.routes.admin import router as admin_router
from portfolio_api.api.routes.contact import router as contact_router
from portfolio_api.api.routes.health import router as health_router
from portfolio_api.api.routes.profile import router as profile_router
from portfolio_api.api.routes.projects import router as projects_router
from portfolio_api.api.routes.uploads import router as uploads_router

__all__ = [
    "admin_router",
    "contact_router",
    "health_router",
    "profile_router",
    "projects_router",
    "uploads_router",
]
