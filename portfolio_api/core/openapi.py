"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- A bearer-token security scheme applied to every ``/admin`` operation

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

ADMIN_PATH_PREFIX = "/admin"

TAGS_METADATA = [
    {"name": "Projects", "description": "Published portfolio projects."},
    {"name": "Profile", "description": "The site owner's public profile."},
    {"name": "Contact", "description": "Rate-limited contact form submissions."},
    {"name": "Admin", "description": "Content management. Requires a bearer token."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and bearer security.

    - Injects ``components.securitySchemes.AdminBearer`` (HTTP bearer, JWT)
    - Marks every operation under ``/admin`` as requiring it; public
      operations stay unauthenticated
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "AdminBearer",
            {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Admin token sent as `Authorization: Bearer <token>`.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith(ADMIN_PATH_PREFIX):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = [{"AdminBearer": []}]

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
