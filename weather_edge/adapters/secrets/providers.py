"""Concrete secret providers."""

from __future__ import annotations

import asyncio
from pathlib import Path

from weather_edge.adapters.secrets.base import AbstractSecretProvider


class StaticSecretProvider(AbstractSecretProvider):
    """Secret bound directly to a string (e.g. an environment variable)."""

    def __init__(self, value: str) -> None:
        self._value = value

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return "StaticSecretProvider(value=***)"

    async def get(self) -> str:
        return self._value


class FileSecretProvider(AbstractSecretProvider):
    """Secret read from a mounted file on every retrieval.

    The file is re-read each time so rotated secrets are picked up without a
    restart. Surrounding whitespace (trailing newline) is stripped.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"FileSecretProvider(path={str(self._path)!r})"

    async def get(self) -> str:
        content = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        return content.strip()
