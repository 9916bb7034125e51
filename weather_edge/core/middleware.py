"""HTTP middleware for request ID propagation and CORS headers.

Usage:
    app.middleware("http")(build_request_id_middleware(header_name))
    app.middleware("http")(build_cors_middleware(origins))
"""

from __future__ import annotations

import time
import uuid
from typing import Awaitable, Callable, Iterable

from fastapi import Request, Response

from weather_edge.core.cors import build_cors_headers
from weather_edge.core.logging import clear_request_id, set_request_id

CallNext = Callable[[Request], Awaitable[Response]]


def build_request_id_middleware(header_name: str) -> Callable[[Request, CallNext], Awaitable[Response]]:
    """Create the middleware for request ID generation and propagation.

    If the client provides the ``header_name`` header (X-Request-ID unless
    LOG_REQUEST_ID_HEADER says otherwise), that value is used. Otherwise, a new UUID is
    generated. The ID is stored in contextvars for log correlation and echoed
    back in the response headers together with the request duration.

    Example:
        >>> # Request arrives with custom ID
        >>> # Headers: {"X-Request-ID": "req-abc-123"}
        >>> # Response includes:
        >>> # {"X-Request-ID": "req-abc-123", "X-Request-Duration-ms": "45.67"}
    """

    async def request_id_middleware(request: Request, call_next: CallNext) -> Response:
        request_id = request.headers.get(header_name) or str(uuid.uuid4())
        set_request_id(request_id)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            clear_request_id()

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers[header_name] = request_id
        response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
        return response

    return request_id_middleware


def build_cors_middleware(allowed_origins: Iterable[str]) -> Callable[[Request, CallNext], Awaitable[Response]]:
    """Create a middleware attaching CORS headers to every response.

    Error responses and the preflight answer carry the same headers as
    successful ones.
    """

    origins = frozenset(allowed_origins)

    async def cors_middleware(request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        response.headers.update(build_cors_headers(request.headers.get("Origin"), origins))
        return response

    return cors_middleware
