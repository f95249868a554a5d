"""Contact rate limiting wired into the HTTP layer.

Rate limiting strategy:
- Rolling window per origin identifier (client IP address).
- Counts are derived from stored inquiries, so limits hold across workers
  that share a store and need no cleanup job.
- Checked after validation and before the inquiry is written; the check
  itself never writes.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request

from portfolio_api.adapters.rate_limit.base import AbstractRateLimiter
from portfolio_api.adapters.rate_limit.store_backed import StoreBackedRateLimiter
from portfolio_api.core.config import settings
from portfolio_api.core.errors import RATE_LIMIT_EXCEEDED, ErrorDetails, RateLimitAppError

logger = logging.getLogger(__name__)

UNKNOWN_ORIGIN = "unknown"


def get_client_origin(request: Request) -> str:
    """Resolve the origin identifier used as the rate limit key.

    Takes the first ``X-Forwarded-For`` hop when the deployment sits behind a
    trusted proxy, otherwise the socket peer address.
    """
    if settings.app.trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop

    return request.client.host if request.client and request.client.host else UNKNOWN_ORIGIN


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """FastAPI dependency building the contact limiter from current settings.

    The limiter itself is stateless; all state lives in the document store
    attached to the application.
    """
    return StoreBackedRateLimiter(
        request.app.state.document_store,
        limit=settings.app.contact_rate_limit_requests,
        window_seconds=settings.app.contact_rate_limit_window_seconds,
        clock=request.app.state.clock,
    )


def _hash_origin(origin: str) -> str:
    """Hash the origin for logging without exposing addresses."""
    return hashlib.sha256(origin.encode()).hexdigest()[:16]


async def enforce_contact_rate_limit(limiter: AbstractRateLimiter, origin: str) -> None:
    """Refuse the submission when ``origin`` is over its window budget.

    Args:
        limiter: Rate limiter to consult.
        origin: Origin identifier of the caller.

    Raises:
        RateLimitAppError: 429 with retry guidance when the limit is reached.
    """
    if not settings.app.contact_rate_limit_enabled:
        return

    result = await limiter.check(origin)
    origin_hash = _hash_origin(origin)

    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "origin_hash": origin_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": settings.app.contact_rate_limit_window_seconds,
            },
        )
        return

    retry_after = result.retry_after_seconds or settings.app.contact_rate_limit_window_seconds
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "origin_hash": origin_hash,
            "limit": result.limit,
            "window_s": settings.app.contact_rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    details: ErrorDetails = {"retryAfter": retry_after, "limit": result.limit}
    raise RateLimitAppError(
        code=RATE_LIMIT_EXCEEDED,
        message="Too many submissions. Please try again later.",
        details=dict(details),
        headers=headers or None,
    )
