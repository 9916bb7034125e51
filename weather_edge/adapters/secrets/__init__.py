"""Secret providers for the upstream API credential."""

from weather_edge.adapters.secrets.base import AbstractSecretProvider
from weather_edge.adapters.secrets.factory import create_secret_provider, resolve_secret
from weather_edge.adapters.secrets.providers import FileSecretProvider, StaticSecretProvider

__all__ = [
    "AbstractSecretProvider",
    "FileSecretProvider",
    "StaticSecretProvider",
    "create_secret_provider",
    "resolve_secret",
]
