"""Application factory for FastAPI app.

Centralizes app construction (collaborators, middleware, handlers, routers)
so tests can inject an in-memory store, a stubbed HTTP transport or a fixed
clock without touching module globals.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator, Callable

import httpx
from fastapi import FastAPI

from weather_edge.adapters.kv_store.base import AbstractKeyValueStore
from weather_edge.adapters.kv_store.factory import create_kv_store
from weather_edge.adapters.secrets.factory import create_secret_provider
from weather_edge.adapters.weather.openweathermap import OpenWeatherMapClient
from weather_edge.api.routes import weather_router
from weather_edge.core.config import Settings, settings as default_settings
from weather_edge.core.exception_handlers import setup_exception_handlers
from weather_edge.core.logging import configure_logging
from weather_edge.core.middleware import build_cors_middleware, build_request_id_middleware
from weather_edge.core.rate_limit import create_rate_limiter
from weather_edge.services.request_router import RequestRouter, SecretProviderFactory


def create_app(
    settings: Settings | None = None,
    *,
    store: AbstractKeyValueStore | None = None,
    http_client: httpx.AsyncClient | None = None,
    secret_provider_factory: SecretProviderFactory | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to use; defaults to the environment-loaded instance.
        store: Counter store; defaults to the backend named by STORE_BACKEND.
        http_client: HTTP client for the weather API; defaults to a new
            ``httpx.AsyncClient`` with the configured timeout that follows
            redirects.
        secret_provider_factory: Callable returning the API key provider;
            defaults to one built from the weather settings on each request.
        clock: Time source for rate limit windows.

    Returns:
        Configured FastAPI app. Collaborators created here (not injected) are
        closed on shutdown.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    owned: list = []
    if store is None:
        store = create_kv_store(cfg.store)
        owned.append(store)

    owns_http_client = http_client is None
    if http_client is None:
        http_client = httpx.AsyncClient(
            timeout=cfg.weather.timeout_seconds,
            follow_redirects=True,
        )

    if secret_provider_factory is None:
        secret_provider_factory = partial(create_secret_provider, cfg.weather)

    weather_client = OpenWeatherMapClient(
        http_client,
        base_url=cfg.weather.base_url,
        units=cfg.weather.units,
        lang=cfg.weather.lang,
    )
    if owns_http_client:
        # Closing the weather client closes its HTTP pool
        owned.append(weather_client)

    request_router = RequestRouter(
        settings=cfg,
        rate_limiter=create_rate_limiter(cfg, store, clock=clock),
        weather_client=weather_client,
        secret_provider_factory=secret_provider_factory,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        for resource in owned:
            await resource.aclose()

    app = FastAPI(
        title="Weather Edge",
        description=(
            "Forwards city weather queries to OpenWeatherMap with a per-IP "
            "fixed-window request quota and CORS headers."
        ),
        version="0.1.0",
        lifespan=lifespan,
        # Only '/' is served; docs routes would shadow the 404 contract
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = cfg
    app.state.store = store
    app.state.http_client = http_client
    app.state.weather_client = weather_client
    app.state.request_router = request_router

    # Middleware (last added runs first)
    app.middleware("http")(build_request_id_middleware(cfg.log.request_id_header))
    app.middleware("http")(build_cors_middleware(cfg.app.cors_allowed_origins))

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(weather_router)

    return app
