"""Key-value store adapters.

The rate limiter only needs get and put-with-TTL, so the counters can live in
process memory for development and tests or in Redis when several instances
share one quota.
"""

from weather_edge.adapters.kv_store.base import AbstractKeyValueStore
from weather_edge.adapters.kv_store.factory import create_kv_store
from weather_edge.adapters.kv_store.in_memory import InMemoryKeyValueStore
from weather_edge.adapters.kv_store.redis_store import RedisKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_kv_store",
]
