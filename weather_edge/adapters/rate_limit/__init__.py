"""Rate limiting adapters.

The limiter keeps its counters in an injected key-value store so the same
code runs against process memory in tests and a shared store in production.
"""

from weather_edge.adapters.rate_limit.base import AbstractRateLimiter, RateDecision
from weather_edge.adapters.rate_limit.fixed_window import FixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "FixedWindowRateLimiter",
    "RateDecision",
]
