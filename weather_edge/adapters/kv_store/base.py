"""Key-value store interface.

Semantics follow an eventually-consistent edge store: per-key TTL expiry, no
cross-key transactions and no compare-and-swap. Callers must not assume a
read observes a concurrent caller's write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractKeyValueStore(ABC):
    """Interface for async string key-value stores with TTL."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent/expired."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: str, *, ttl_seconds: int) -> None:
        """Store ``value`` under ``key``, expiring after ``ttl_seconds``.

        Raises:
            ValueError: If ttl_seconds is not positive.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections held by the store."""
        return None
