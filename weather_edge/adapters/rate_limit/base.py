"""Rate limiter interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateDecision:
    """Result of evaluating a client's counter against the limit.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        remaining: Requests left in the current window (0 when denied).
    """

    allowed: bool
    remaining: int


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    limit: int
    window_seconds: int

    @abstractmethod
    async def evaluate(self, client_ip: str, now: float | None = None) -> RateDecision:
        """Decide whether ``client_ip`` may make a request at ``now``.

        Args:
            client_ip: Identity being limited.
            now: UNIX time in seconds; defaults to the limiter's clock.

        Returns:
            RateDecision describing whether it was allowed.
        """
        raise NotImplementedError
