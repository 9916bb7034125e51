"""Upstream weather API adapters."""

from weather_edge.adapters.weather.base import AbstractWeatherClient
from weather_edge.adapters.weather.openweathermap import OpenWeatherMapClient

__all__ = [
    "AbstractWeatherClient",
    "OpenWeatherMapClient",
]
