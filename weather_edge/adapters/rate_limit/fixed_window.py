"""Fixed-window rate limiter over a key-value store.

Time is cut into windows of ``window_seconds``; each (client IP, window)
pair owns one counter stored under ``<prefix>:<ip>:<window_index>`` with a
TTL of one window, so stale windows expire on their own.

Concurrency:
    The read and the write are two separate store calls with no
    compare-and-swap between them. Concurrent requests from one IP in one
    window can read the same count and each write ``count + 1``, so more than
    ``limit`` requests may be admitted under simultaneous arrivals. Denied
    requests never write, so they neither count nor refresh the TTL.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from weather_edge.adapters.kv_store.base import AbstractKeyValueStore
from weather_edge.adapters.rate_limit.base import AbstractRateLimiter, RateDecision

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_IP = "unknown"


class FixedWindowRateLimiter(AbstractRateLimiter):
    """Per-IP fixed-window counter backed by an injected store."""

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        limit: int,
        window_seconds: int,
        key_prefix: str = "rate_limit",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Key-value store holding the counters.
            limit: Maximum number of admitted requests per window.
            window_seconds: Size of the fixed window in seconds.
            key_prefix: Namespace of counter keys.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self.limit = limit
        self.window_seconds = window_seconds
        self._store = store
        self._key_prefix = key_prefix
        self._clock = clock

    def window_index(self, now: float) -> int:
        return math.floor(now / self.window_seconds)

    def build_key(self, client_ip: str, window_index: int) -> str:
        return f"{self._key_prefix}:{client_ip}:{window_index}"

    @staticmethod
    def _parse_count(raw: str | None) -> int:
        """Parse a stored counter; absent or garbage values count as 0."""
        if raw is None:
            return 0
        try:
            count = int(raw.strip())
        except ValueError:
            logger.warning("rate_limit.unparsable_counter", extra={"raw_value": raw[:32]})
            return 0
        return max(count, 0)

    async def evaluate(self, client_ip: str, now: float | None = None) -> RateDecision:
        """Check the counter for ``client_ip`` and consume one unit if allowed.

        Args:
            client_ip: Client IP, or ``"unknown"`` when the proxy header is absent.
            now: UNIX time in seconds; defaults to the injected clock.

        Returns:
            RateDecision; ``remaining = limit - count - 1`` when allowed.
        """
        if now is None:
            now = self._clock()

        key = self.build_key(client_ip or UNKNOWN_CLIENT_IP, self.window_index(now))
        count = self._parse_count(await self._store.get(key))

        if count >= self.limit:
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "client_ip": client_ip,
                    "count": count,
                    "limit": self.limit,
                    "window_s": self.window_seconds,
                },
            )
            return RateDecision(allowed=False, remaining=0)

        await self._store.put(key, str(count + 1), ttl_seconds=self.window_seconds)

        remaining = max(0, self.limit - count - 1)
        logger.info(
            "rate_limit.allowed",
            extra={
                "client_ip": client_ip,
                "limit": self.limit,
                "remaining": remaining,
                "window_s": self.window_seconds,
            },
        )
        return RateDecision(allowed=True, remaining=remaining)
