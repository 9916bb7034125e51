"""In-memory key-value store with per-key TTL.

Notes:
- Per-process only: running multiple workers gives each worker its own
  counters, multiplying the effective rate limit. Use the Redis store there.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from weather_edge.adapters.kv_store.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: str
    expires_at: float


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dictionary-backed store; expired keys read as absent and are evicted lazily."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired_locked()
            return len(self._entries)

    async def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                self._entries.pop(key, None)
                logger.debug("kv.expired", extra={"kv_key": key})
                return None
            return entry.value

    async def put(self, key: str, value: str, *, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        with self._lock:
            self._evict_expired_locked()
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired_keys = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired_keys:
            self._entries.pop(key, None)
