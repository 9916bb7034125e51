"""Redis-backed key-value store.

Only plain GET and SET EX are issued, so concurrent read/modify/write cycles
behave like the edge store they replace: last writer wins.
"""

from __future__ import annotations

from typing import Any

import redis.asyncio as aioredis

from weather_edge.adapters.kv_store.base import AbstractKeyValueStore


class RedisKeyValueStore(AbstractKeyValueStore):
    """Store counters in Redis with native key expiry."""

    def __init__(self, *, redis_url: str | None = None, client: Any = None) -> None:
        """Initialize the store from a URL or an existing client.

        Args:
            redis_url: Connection URL, used when ``client`` is not given.
            client: Pre-built ``redis.asyncio.Redis`` client (tests, shared pools).

        Raises:
            ValueError: If neither argument is provided.
        """
        if client is None and not redis_url:
            raise ValueError("redis_url or client is required")
        self._client = client if client is not None else aioredis.from_url(redis_url)

    async def get(self, key: str) -> str | None:
        value = await self._client.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    async def put(self, key: str, value: str, *, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        await self._client.set(key, value, ex=ttl_seconds)

    async def aclose(self) -> None:
        await self._client.aclose()
