from __future__ import annotations

from weather_edge.api.routes.weather import router as weather_router

__all__ = ["weather_router"]
