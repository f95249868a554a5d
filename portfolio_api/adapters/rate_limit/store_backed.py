"""Sliding-window rate limiter backed by the document store.

Each check counts the inquiries an origin created inside the trailing window.
The count-then-write sequence is not atomic: two submissions landing at the
same instant can both observe a count below the threshold, so an origin may
briefly exceed the limit by one. The limiter deters spam; it is not a
security boundary.
"""

from __future__ import annotations

import math
import time
from datetime import datetime, timedelta, timezone
from typing import Callable

from portfolio_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from portfolio_api.adapters.store.base import AbstractDocumentStore


class StoreBackedRateLimiter(AbstractRateLimiter):
    """Rate limiter counting stored inquiries per origin in a rolling window."""

    def __init__(
        self,
        store: AbstractDocumentStore,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Document store holding the inquiries being counted.
            limit: Maximum submissions allowed per window.
            window_seconds: Size of the rolling window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._store = store
        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    async def check(self, key: str) -> RateLimitResult:
        """Count recent submissions for ``key`` and decide whether another is allowed.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        window_start = datetime.fromtimestamp(now, tz=timezone.utc) - timedelta(
            seconds=self._window_seconds
        )

        count = await self._store.count_recent_inquiries(key, window_start)
        remaining = max(0, self._limit - count)

        if count < self._limit:
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=remaining,
                reset_at=int(now) + self._window_seconds,
                retry_after_seconds=None,
            )

        oldest = await self._store.oldest_recent_inquiry_at(key, window_start)
        if oldest is None:
            # The window emptied between the two reads
            expires_at = now
        else:
            expires_at = oldest.timestamp() + self._window_seconds

        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=int(math.ceil(expires_at)),
            retry_after_seconds=max(1, int(math.ceil(expires_at - now))),
        )
