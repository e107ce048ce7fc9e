"""GitHub API rate limit tracking."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)

MAX_WAIT_SECONDS = 3600


class RateLimitMonitor:
    """Pauses requests when the primary or secondary rate limit is close.

    The primary limit comes from ``X-RateLimit-Remaining``/``X-RateLimit-Reset``;
    a secondary limit is announced with ``Retry-After`` on a 403 or 429.
    """

    def __init__(self, threshold: int = 10) -> None:
        self._remaining: int | None = None
        self._reset_at: float | None = None
        self._retry_after_until: float | None = None
        self._threshold = threshold

    @property
    def remaining(self) -> int | None:
        return self._remaining

    def update(self, response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset_at = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self._remaining = int(remaining)
        if reset_at is not None:
            self._reset_at = float(reset_at)

        retry_after = response.headers.get("Retry-After")
        if retry_after is not None and response.status_code in (403, 429):
            try:
                self._retry_after_until = time.time() + float(retry_after)
            except ValueError:
                logger.debug("ignoring unparseable Retry-After %r", retry_after)

    def seconds_to_wait(self, now: float | None = None) -> float:
        now = time.time() if now is None else now
        wait = 0.0
        if self._retry_after_until is not None:
            wait = max(wait, self._retry_after_until - now)
        if (
            self._remaining is not None
            and self._remaining <= self._threshold
            and self._reset_at is not None
        ):
            wait = max(wait, self._reset_at - now + 1)
        return min(wait, MAX_WAIT_SECONDS)

    async def wait_if_needed(self) -> None:
        wait_seconds = self.seconds_to_wait()
        if wait_seconds > 0:
            logger.warning("rate limit reached, sleeping %.0fs", wait_seconds)
            await asyncio.sleep(wait_seconds)
            self._retry_after_until = None
