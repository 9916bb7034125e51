"""CORS header computation.

Allow-listed origins are echoed back; any other origin, or none at all,
receives the wildcard.
"""

from __future__ import annotations

from typing import AbstractSet

from weather_edge.core.config import DEFAULT_CORS_ORIGINS

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"
PREFLIGHT_MAX_AGE_SECONDS = 86400


def resolve_allowed_origin(origin: str | None, allowed_origins: AbstractSet[str]) -> str:
    if origin and origin in allowed_origins:
        return origin
    return "*"


def build_cors_headers(
    origin: str | None,
    allowed_origins: AbstractSet[str] = frozenset(DEFAULT_CORS_ORIGINS),
) -> dict[str, str]:
    """Return the CORS headers for a request coming from ``origin``.

    Args:
        origin: Value of the request's Origin header, if any.
        allowed_origins: Origins that are echoed back verbatim.

    Returns:
        Header mapping to merge into the response.
    """
    allow_origin = resolve_allowed_origin(origin, allowed_origins)
    headers = {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE_SECONDS),
    }
    if allow_origin != "*":
        # Response differs per origin, caches must key on it
        headers["Vary"] = "Origin"
    return headers
