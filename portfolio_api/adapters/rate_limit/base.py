"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
counting source can change with minimal impact on the handlers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max submissions per window.
        remaining: Submissions left in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest counted submission expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    async def check(self, key: str) -> RateLimitResult:
        """Check the budget for a key without consuming it.

        The caller's successful write is what counts toward later checks.

        Args:
            key: Origin identifier (e.g. client IP address).

        Returns:
            RateLimitResult describing whether the request may proceed.
        """
        raise NotImplementedError
