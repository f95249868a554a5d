"""HTTP middleware: request correlation and origin policy.

``request_id_middleware``
    Accepts an incoming X-Request-ID header or generates a UUID, stores it in
    contextvars for log correlation, and echoes it (plus the request
    duration) on the response.

``cors_middleware``
    Public reads (GET/HEAD) are readable from any origin. Mutating requests
    (POST/PUT/PATCH/DELETE) and their preflights are only granted CORS
    headers for origins in ``APP_CORS_ALLOWED_ORIGINS``; a mutating request
    that announces a foreign ``Origin`` is refused with 403 before it reaches
    a handler. Requests without an ``Origin`` header (server-to-server) are
    not browser cross-origin calls and pass through.

Usage:
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from portfolio_api.core.config import settings
from portfolio_api.core.errors import ORIGIN_NOT_ALLOWED
from portfolio_api.core.exception_handlers import error_response
from portfolio_api.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

READ_METHODS = frozenset({"GET", "HEAD"})
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
PREFLIGHT_MAX_AGE = "600"


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate a correlation id through logs and response headers.

    Side Effects:
        - Sets request_id in contextvars (accessible via get_request_id())
        - Clears request_id from contextvars after request completes
        - Adds X-Request-ID and X-Request-Duration-ms headers to the response
    """
    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


def is_origin_allowed(origin: str | None) -> bool:
    return bool(origin) and origin in settings.app.allowed_origins


def _grant_origin(response: Response, origin: str) -> None:
    response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Vary"] = "Origin"


def _forbidden_origin(request: Request, origin: str) -> Response:
    logger.warning(
        "cors.origin_rejected",
        extra={"request_path": request.url.path, "request_method": request.method, "caller_origin": origin},
    )
    return error_response(403, ORIGIN_NOT_ALLOWED, "Origin not allowed")


def _preflight(request: Request, origin: str | None) -> Response:
    requested = request.headers.get("access-control-request-method", "").upper()

    # Allow-listed origins (the admin UI) may also send Authorization on reads
    if is_origin_allowed(origin):
        response = Response(status_code=204)
        _grant_origin(response, origin)  # type: ignore[arg-type]
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    elif requested in READ_METHODS:
        response = Response(status_code=204)
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, HEAD, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    else:
        return _forbidden_origin(request, origin or "")

    response.headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
    return response


async def cors_middleware(request: Request, call_next) -> Response:
    """Apply the public-read / allow-listed-write origin policy."""
    origin = request.headers.get("origin")
    method = request.method.upper()

    if method == "OPTIONS" and "access-control-request-method" in request.headers:
        return _preflight(request, origin)

    if method in MUTATING_METHODS and origin and not is_origin_allowed(origin):
        return _forbidden_origin(request, origin)

    response: Response = await call_next(request)

    if method in READ_METHODS:
        response.headers["Access-Control-Allow-Origin"] = "*"
    elif is_origin_allowed(origin):
        _grant_origin(response, origin)  # type: ignore[arg-type]
    return response
