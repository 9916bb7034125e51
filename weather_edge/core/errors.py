"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.

Each error class carries the HTTP status it maps to and the short title used
as the ``error`` field of the JSON body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context rendered into the response body.

    Keys are emitted verbatim next to ``error``/``message``, so they use the
    wire spelling (``retryAfter``, ``status``).
    """

    status: int
    retryAfter: int
    hint: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code (logged, not rendered).
        message: Human-readable error message.
        details: Optional structured details merged into the JSON body.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 500
    title: ClassVar[str] = "Internal Error"
    include_message: ClassVar[bool] = True

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)

    def headers(self) -> dict[str, str]:
        """Extra response headers for this error."""
        return {}

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.title}
        if self.include_message:
            body["message"] = self.message
        if self.details:
            body.update(self.details)
        return body


class ConfigurationAppError(AppError):
    """Raised when the service is missing or has malformed configuration."""

    status_code = 500
    title = "Configuration Error"


class UpstreamAppError(AppError):
    """Raised when the weather API answers with a non-success status."""

    status_code = 502
    title = "Weather API Error"
    include_message = False


@dataclass
class QuotaExceededAppError(AppError):
    """Raised when a client exhausted its requests for the current window."""

    limit: int = 0
    retry_after: int = 0

    status_code = 429
    title = "Too many requests, please try again later"
    include_message = False

    def headers(self) -> dict[str, str]:
        return {
            "Retry-After": str(self.retry_after),
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": "0",
        }


class NotFoundAppError(AppError):
    """Raised for paths the service does not serve."""

    status_code = 404
    title = "Not Found"


@dataclass
class MethodNotAllowedAppError(AppError):
    """Raised for HTTP methods the service does not serve."""

    allow: str = ""

    status_code = 405
    title = "Method Not Allowed"

    def headers(self) -> dict[str, str]:
        return {"Allow": self.allow} if self.allow else {}


class UnclassifiedAppError(AppError):
    """Wraps any unexpected failure caught at the top-level boundary."""

    status_code = 500
    title = "Internal Error"
