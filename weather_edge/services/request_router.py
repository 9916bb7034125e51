"""Request orchestration for the weather endpoint.

A request walks a linear sequence of stages, each either passing control to
the next one or ending the request with a response:

1. preflight: ``OPTIONS`` answers 204 without touching anything else
2. path check: anything but ``/`` is a 404 (when enabled), then any method
   other than GET or POST is a 405
3. credential resolution: the upstream API key must resolve to a non-empty string
4. rate limit: the client IP must have budget left in the current window
5. upstream fetch: the weather API must answer with a success status
6. response shaping: upstream JSON bytes are returned with rate limit headers

Stages signal failure by raising ``AppError`` subclasses; ``handle`` converts
them, and any unexpected exception, into JSON responses so nothing escapes to
the ASGI server. There are no retries.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from weather_edge.adapters.rate_limit.base import AbstractRateLimiter, RateDecision
from weather_edge.adapters.secrets.base import AbstractSecretProvider
from weather_edge.adapters.secrets.factory import resolve_secret
from weather_edge.adapters.weather.base import AbstractWeatherClient
from weather_edge.core.config import Settings
from weather_edge.core.errors import (
    AppError,
    MethodNotAllowedAppError,
    NotFoundAppError,
    QuotaExceededAppError,
    UnclassifiedAppError,
)
from weather_edge.core.exception_handlers import render_app_error
from weather_edge.core.rate_limit import get_client_ip
from weather_edge.schemas.weather import WeatherQuery

logger = logging.getLogger(__name__)

ROOT_PATH = "/"
SERVED_METHODS = ("GET", "POST")

SecretProviderFactory = Callable[[], AbstractSecretProvider | None]


class RequestRouter:
    """Validate, rate limit and forward weather queries."""

    def __init__(
        self,
        *,
        settings: Settings,
        rate_limiter: AbstractRateLimiter,
        weather_client: AbstractWeatherClient,
        secret_provider_factory: SecretProviderFactory,
    ) -> None:
        self._settings = settings
        self._rate_limiter = rate_limiter
        self._weather_client = weather_client
        self._secret_provider_factory = secret_provider_factory

    async def handle(self, request: Request) -> Response:
        """Produce the response for ``request``; never raises."""
        if request.method == "OPTIONS":
            return Response(status_code=204)

        start = time.perf_counter()
        client_ip = get_client_ip(request, self._settings.app.client_ip_header)
        logger.info(
            "weather.request_started",
            extra={
                "client_ip": client_ip,
                "request_path": request.url.path,
                "query": request.url.query,
            },
        )

        try:
            return await self._process(request, client_ip, start)
        except AppError as exc:
            logger.warning(
                "app_error_handled",
                extra={
                    "client_ip": client_ip,
                    "error_code": exc.code,
                    "error_message": exc.message,
                    "status_code": exc.status_code,
                },
            )
            return render_app_error(exc)
        except Exception as exc:
            logger.exception(
                "weather.unhandled_exception",
                extra={
                    "client_ip": client_ip,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return render_app_error(
                UnclassifiedAppError(code="internal_error", message=str(exc) or type(exc).__name__)
            )

    async def _process(self, request: Request, client_ip: str, start: float) -> Response:
        self._check_path(request.url.path)
        self._check_method(request.method)
        api_key = await resolve_secret(self._secret_provider_factory())

        decision = await self._rate_limiter.evaluate(client_ip)
        if not decision.allowed:
            window = self._rate_limiter.window_seconds
            raise QuotaExceededAppError(
                code="rate_limit_exceeded",
                message=f"Client {client_ip} exceeded {self._rate_limiter.limit} requests per {window}s",
                details={"retryAfter": window},
                limit=self._rate_limiter.limit,
                retry_after=window,
            )

        query = WeatherQuery.from_params(
            next(iter(request.query_params.getlist("city")), None),
            self._settings.weather.default_city,
        )
        logger.info(
            "weather.query",
            extra={
                "city": query.city,
                "defaulted": query.defaulted,
                "remaining": decision.remaining,
            },
        )

        body = await self._weather_client.fetch_current(query.city, api_key=api_key)

        logger.info(
            "weather.request_completed",
            extra={
                "client_ip": client_ip,
                "city": query.city,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return Response(
            content=body,
            media_type="application/json",
            headers=self._rate_limit_headers(decision),
        )

    def _check_path(self, path: str) -> None:
        if self._settings.app.enforce_root_path and path != ROOT_PATH:
            raise NotFoundAppError(
                code="not_found",
                message=f"Path '{path}' does not exist. Use GET /?city=<name>",
            )

    def _check_method(self, method: str) -> None:
        if method not in SERVED_METHODS:
            raise MethodNotAllowedAppError(
                code="method_not_allowed",
                message=f"Method {method} is not allowed",
                allow=", ".join((*SERVED_METHODS, "OPTIONS")),
            )

    def _rate_limit_headers(self, decision: RateDecision) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self._rate_limiter.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
        }
