"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before anything imports the settings module,
so the global settings instance is built from these values.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("WEATHER_API_KEY", "test-weather-key")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Callable
from unittest.mock import Mock

import httpx
import pytest
from fastapi.testclient import TestClient

from weather_edge.adapters.kv_store.in_memory import InMemoryKeyValueStore
from weather_edge.core.app_factory import create_app
from weather_edge.core.config import AppSettings, LogSettings, Settings, WeatherSettings

# Start of a 60-second window (1_200_000 / 60 == 20_000)
WINDOW_START = 1_200_000.0


class UpstreamStub:
    """Records requests sent to the weather API and answers with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: Any = {"temp": 20}
        self.content: bytes | None = None
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def clock() -> Mock:
    return Mock(return_value=WINDOW_START)


@pytest.fixture
def store(clock: Mock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def make_client(
    clock: Mock,
    store: InMemoryKeyValueStore,
    upstream: UpstreamStub,
) -> Callable[..., TestClient]:
    """Build a TestClient over an app with injected store, clock and upstream.

    Keyword arguments are forwarded to create_app; ``app_settings``,
    ``weather_settings`` and ``log_settings`` override the corresponding
    settings groups, and ``http_client`` replaces the stubbed upstream client.
    """

    def _make(
        *,
        app_settings: AppSettings | None = None,
        weather_settings: WeatherSettings | None = None,
        log_settings: LogSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> TestClient:
        settings = Settings(
            app=app_settings or AppSettings(rate_limit_requests=3, rate_limit_window_seconds=60),
            weather=weather_settings or WeatherSettings(),
            log=log_settings or LogSettings(),
        )
        app = create_app(
            settings,
            store=store,
            http_client=http_client or httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
            clock=clock,
            **kwargs,
        )
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client()
