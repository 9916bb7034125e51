"""Rate limiting wiring for the HTTP layer.

Builds the limiter from settings and extracts the identity it limits on.
"""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request

from weather_edge.adapters.kv_store.base import AbstractKeyValueStore
from weather_edge.adapters.rate_limit.base import AbstractRateLimiter
from weather_edge.adapters.rate_limit.fixed_window import UNKNOWN_CLIENT_IP, FixedWindowRateLimiter
from weather_edge.core.config import Settings


def create_rate_limiter(
    settings: Settings,
    store: AbstractKeyValueStore,
    *,
    clock: Callable[[], float] = time.time,
) -> AbstractRateLimiter:
    """Build the fixed-window limiter configured by ``APP_RATE_LIMIT_*``.

    Args:
        settings: Resolved settings.
        store: Shared store holding the counters.
        clock: Time source function returning UNIX time in seconds.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    return FixedWindowRateLimiter(
        store,
        limit=settings.app.rate_limit_requests,
        window_seconds=settings.app.rate_limit_window_seconds,
        key_prefix=settings.store.key_prefix,
        clock=clock,
    )


def get_client_ip(request: Request, header_name: str) -> str:
    """Return the client IP from the trusted proxy header.

    The socket peer is deliberately ignored: behind the edge proxy it is the
    proxy itself. Requests without the header share the ``"unknown"`` bucket.
    """

    value = request.headers.get(header_name, "").strip()
    return value or UNKNOWN_CLIENT_IP
