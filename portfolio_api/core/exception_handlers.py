"""Global exception handlers for consistent error responses.

Every error leaving the API has the same JSON shape::

    {"error": str, "code": str, "timestamp": ISO-8601, "details"?: any}

Design:
- AppError subclasses → the status declared on the class (400/401/404/429/500)
- Framework HTTP errors (unknown route, wrong method) → same shape
- Body parsing errors → 400 VALIDATION_ERROR
- Unexpected Exception → generic 500 (full detail logged, nothing leaked)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_api.core.errors import (
    INTERNAL_ERROR,
    METHOD_NOT_ALLOWED,
    NOT_FOUND,
    VALIDATION_ERROR,
    AppError,
    UnexpectedAppError,
)
from portfolio_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

_HTTP_STATUS_CODES = {
    400: VALIDATION_ERROR,
    404: NOT_FOUND,
    405: METHOD_NOT_ALLOWED,
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build the uniform error body; ``details`` is omitted when empty."""
    body: dict[str, Any] = {"error": message, "code": code, "timestamp": _timestamp()}
    if details:
        body["details"] = details
    return body


def error_response(
    status_code: int,
    code: str,
    message: str,
    *,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a JSONResponse carrying the uniform error body."""
    return JSONResponse(
        status_code=status_code,
        content=error_body(code, message, details),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    Client faults are logged at warning level with their code; server faults
    (``UnexpectedAppError``) are logged with the stack and answered with a
    generic message so storage details never reach the caller.
    """
    status_code = exc.http_status

    if isinstance(exc, UnexpectedAppError):
        logger.error(
            "unexpected_app_error",
            exc_info=exc,
            extra={
                "error_code": exc.code,
                "error_msg": exc.message,
                "request_path": request.url.path,
                "request_method": request.method,
            },
        )
        return error_response(status_code, INTERNAL_ERROR, GENERIC_ERROR_MESSAGE)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )
    return error_response(
        status_code,
        exc.code,
        exc.message,
        details=exc.details,
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Map framework HTTP errors (404 route, 405 method, ...) to the uniform body."""
    code = _HTTP_STATUS_CODES.get(exc.status_code, INTERNAL_ERROR if exc.status_code >= 500 else "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404:
        message = "Not found"

    logger.info(
        "http_error_handled",
        extra={
            "status_code": exc.status_code,
            "error_code": code,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return error_response(exc.status_code, code, message, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or a non-object body → 400 VALIDATION_ERROR."""
    fields: dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        fields[".".join(location) or "body"] = error.get("msg", "Invalid value")

    logger.warning(
        "request_validation_failed",
        extra={"request_path": request.url.path, "fields": sorted(fields)},
    )
    return error_response(400, VALIDATION_ERROR, "Validation failed", details=fields)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the exception with its stack while returning a generic message.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )
    return error_response(500, INTERNAL_ERROR, GENERIC_ERROR_MESSAGE)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
