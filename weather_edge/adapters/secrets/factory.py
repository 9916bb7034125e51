"""Build and resolve the weather API credential.

Resolution happens per request so a broken binding surfaces as a structured
500 response instead of preventing startup. Each failure mode has its own
error code:

- ``api_key_missing``: no binding configured at all
- ``api_key_unsupported_source``: binding of an unrecognized kind
- ``api_key_retrieval_failed``: the provider raised while fetching
- ``api_key_empty``: the provider returned an empty string
"""

from __future__ import annotations

import logging

from weather_edge.adapters.secrets.base import AbstractSecretProvider
from weather_edge.adapters.secrets.providers import FileSecretProvider, StaticSecretProvider
from weather_edge.core.config import WeatherSettings
from weather_edge.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


def create_secret_provider(weather_settings: WeatherSettings) -> AbstractSecretProvider | None:
    """Create the provider for the configured API key source.

    Returns:
        The provider, or None when no binding is configured.

    Raises:
        ConfigurationAppError: If the source is not recognized.
    """
    source = weather_settings.api_key_source.lower()

    if source == "env":
        if weather_settings.api_key is None:
            return None
        return StaticSecretProvider(weather_settings.api_key)

    if source == "file":
        if not weather_settings.api_key_file:
            return None
        return FileSecretProvider(weather_settings.api_key_file)

    raise ConfigurationAppError(
        code="api_key_unsupported_source",
        message=f"WEATHER_API_KEY has an unsupported source: '{source}'. Supported sources: env, file",
    )


async def resolve_secret(provider: AbstractSecretProvider | None) -> str:
    """Resolve a provider into a plain, non-empty string.

    Raises:
        ConfigurationAppError: For a missing binding, a failed retrieval or an
            empty value.
    """
    if provider is None:
        raise ConfigurationAppError(
            code="api_key_missing",
            message="WEATHER_API_KEY is not configured",
        )

    try:
        value = await provider.get()
    except Exception as exc:
        logger.error(
            "secret.retrieval_failed",
            extra={"provider": type(provider).__name__, "error_type": type(exc).__name__},
        )
        raise ConfigurationAppError(
            code="api_key_retrieval_failed",
            message=f"Failed to retrieve WEATHER_API_KEY: {exc}",
        ) from exc

    if not value:
        raise ConfigurationAppError(
            code="api_key_empty",
            message="WEATHER_API_KEY is empty",
        )
    return value
