"""Application-level exception types.

This module defines domain errors used across handlers and adapters, enabling
consistent error handling, logging, and API responses. Each error class
carries the HTTP status it maps to, so the exception handlers never need to
guess from the type hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured context sent to clients under ``details`` for non-field errors."""

    retryAfter: int
    limit: int
    maxBytes: int
    allowedTypes: list[str]
    allowedFolders: list[str]


# Stable machine-readable codes shared by handlers and tests
VALIDATION_ERROR = "VALIDATION_ERROR"
AUTH_ERROR = "AUTH_ERROR"
NOT_FOUND = "NOT_FOUND"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
ORIGIN_NOT_ALLOWED = "ORIGIN_NOT_ALLOWED"
INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details returned to the caller.
        headers: Optional response headers (e.g. Retry-After).
    """

    code: str
    message: str
    details: dict[str, Any] | None = None
    headers: dict[str, str] | None = field(default=None, repr=False)

    http_status: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input fails validation."""

    http_status = 400


class AuthenticationAppError(AppError):
    """Raised when an admin credential is missing or invalid.

    Callers always see the same code and message; the reason lives only in
    server logs.
    """

    http_status = 401


class NotFoundAppError(AppError):
    """Raised when an id does not exist (or is hidden from the caller)."""

    http_status = 404


class RateLimitAppError(AppError):
    """Raised when an origin exceeds the contact submission threshold."""

    http_status = 429


class UnexpectedAppError(AppError):
    """Raised for server-side failures; the message is never sent to clients."""

    http_status = 500


class StoreUnavailableError(UnexpectedAppError):
    """Raised by document store adapters when the backing store fails."""


def auth_error() -> AuthenticationAppError:
    """Build the single, uniform authentication failure."""
    return AuthenticationAppError(code=AUTH_ERROR, message="Authentication required")


def not_found(kind: str) -> NotFoundAppError:
    """Build a NOT_FOUND error for a record kind (e.g. ``"Project"``)."""
    return NotFoundAppError(code=NOT_FOUND, message=f"{kind} not found")


def validation_failed(fields: dict[str, str]) -> ValidationAppError:
    """Build a VALIDATION_ERROR whose details map each offending field to a message."""
    return ValidationAppError(
        code=VALIDATION_ERROR,
        message="Validation failed",
        details=dict(fields),
    )
