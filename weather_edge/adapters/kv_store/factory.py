"""Factory for the configured key-value store backend."""

from weather_edge.adapters.kv_store.base import AbstractKeyValueStore
from weather_edge.adapters.kv_store.in_memory import InMemoryKeyValueStore
from weather_edge.adapters.kv_store.redis_store import RedisKeyValueStore
from weather_edge.core.config import StoreSettings
from weather_edge.core.errors import ConfigurationAppError


def create_kv_store(store_settings: StoreSettings) -> AbstractKeyValueStore:
    """Instantiate the store selected by ``STORE_BACKEND``.

    Raises:
        ConfigurationAppError: If the backend is unknown.
    """
    backend = store_settings.backend.lower()

    if backend == "memory":
        return InMemoryKeyValueStore()

    if backend == "redis":
        return RedisKeyValueStore(redis_url=store_settings.redis_url)

    raise ConfigurationAppError(
        code="store_unknown_backend",
        message=f"Unknown store backend: '{backend}'. Supported backends: memory, redis",
    )
