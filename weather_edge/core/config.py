"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


DEFAULT_CORS_ORIGINS: list[str] = [
    f"http://{host}:{port}"
    for port in (3000, 5173, 5500, 8080)
    for host in ("127.0.0.1", "localhost")
]


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_weather_settings() -> "WeatherSettings":
    return WeatherSettings()  # type: ignore[call-arg]


def _build_store_settings() -> "StoreSettings":
    return StoreSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    rate_limit_requests: int = Field(
        10,
        description="Maximum number of requests allowed per window (per client IP)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    client_ip_header: str = Field(
        "CF-Connecting-IP",
        description="Trusted proxy header carrying the client IP",
    )
    enforce_root_path: bool = Field(
        True,
        description="Answer 404 for any path other than '/'",
    )
    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
        description="Origins echoed back in Access-Control-Allow-Origin; others get '*'",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class WeatherSettings(BaseSettings):
    """Upstream weather API configuration.

    The API key binding is read from ``WEATHER_API_KEY`` by default. Setting
    ``WEATHER_API_KEY_SOURCE=file`` reads it from ``WEATHER_API_KEY_FILE``
    instead (e.g. a mounted container secret).
    """

    api_key: str | None = Field(
        None,
        description="OpenWeatherMap API key (appid)",
    )
    api_key_source: str = Field(
        "env",
        description="Where the API key comes from: env or file",
    )
    api_key_file: str | None = Field(
        None,
        description="Path of the file holding the API key when api_key_source=file",
    )
    base_url: str = Field(
        "https://api.openweathermap.org",
        description="Weather API base URL",
    )
    units: str = Field("metric", description="Units passed to the weather API")
    lang: str = Field("zh_cn", description="Language passed to the weather API")
    default_city: str = Field(
        "Beijing",
        description="City queried when the request carries no 'city' parameter",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Upstream request timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="WEATHER_",
        case_sensitive=False,
    )


class StoreSettings(BaseSettings):
    """Key-value store backing the rate limit counters."""

    backend: str = Field(
        "memory",
        description="Store backend: memory or redis",
    )
    redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL when backend=redis",
    )
    key_prefix: str = Field(
        "rate_limit",
        description="Prefix of rate limit counter keys",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate the request id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    weather: WeatherSettings = Field(default_factory=_build_weather_settings)
    store: StoreSettings = Field(default_factory=_build_store_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
