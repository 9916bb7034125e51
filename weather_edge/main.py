"""ASGI entry point: ``uvicorn weather_edge.main:app``."""

from weather_edge.core.app_factory import create_app

app = create_app()
