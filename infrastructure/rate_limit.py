"""
Fixed-window rate limiting backed by the ``limits`` library.

Counters live in Redis when REDIS_URI is configured so every worker shares
the same window, and in process memory otherwise.
"""

from __future__ import annotations

from typing import Optional

from limits import RateLimitItem, parse
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string

from errors import RateLimitError
from shared.logging import get_logger

log = get_logger(__name__)


def _storage_uri(redis_uri: Optional[str]) -> str:
    if not redis_uri:
        return "async+memory://"
    if redis_uri.startswith("async+"):
        return redis_uri
    return f"async+{redis_uri}"


class RateLimiter:
    """One named limit (e.g. "6 per 15 minutes") applied per caller key."""

    def __init__(
        self,
        name: str,
        limit: str,
        redis_uri: Optional[str] = None,
    ) -> None:
        self.name = name
        self._item: RateLimitItem = parse(limit)
        options = {"implementation": "redispy"} if redis_uri else {}
        self._storage = storage_from_string(_storage_uri(redis_uri), **options)
        self._strategy = FixedWindowRateLimiter(self._storage)

    async def hit(self, key: str) -> None:
        """Consume one unit for *key*; raise RateLimitError once the window is full."""
        allowed = await self._strategy.hit(self._item, self.name, key)
        if not allowed:
            log.warning("rate_limit_exceeded", limiter=self.name, key=key)
            raise RateLimitError("Too many requests. Please try again later.")
