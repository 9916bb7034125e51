"""OpenWeatherMap current-weather client."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from weather_edge.adapters.weather.base import AbstractWeatherClient
from weather_edge.core.errors import UpstreamAppError

logger = logging.getLogger(__name__)

CURRENT_WEATHER_PATH = "/data/2.5/weather"
URI_COMPONENT_SAFE = "!'()*"


class OpenWeatherMapClient(AbstractWeatherClient):
    """Client for the OpenWeatherMap ``/data/2.5/weather`` endpoint.

    Uses a shared ``httpx.AsyncClient`` for connection pooling. No retries:
    any failure is terminal for the request.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str = "https://api.openweathermap.org",
        units: str = "metric",
        lang: str = "zh_cn",
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._units = units
        self._lang = lang

    def build_url(self, city: str, api_key: str) -> str:
        """Build the request URL.

        The city and key are percent-encoded with the same reserved set as
        JavaScript's ``encodeURIComponent``, which leaves ``!'()*`` intact.
        """
        return (
            f"{self._base_url}{CURRENT_WEATHER_PATH}"
            f"?q={quote(city, safe=URI_COMPONENT_SAFE)}"
            f"&appid={quote(api_key, safe=URI_COMPONENT_SAFE)}"
            f"&units={self._units}&lang={self._lang}"
        )

    async def fetch_current(self, city: str, *, api_key: str) -> bytes:
        """Fetch current weather and return the upstream JSON body verbatim.

        The body is parsed once to reject non-JSON payloads, but the raw bytes
        are returned so values Python cannot re-encode (such as ``1e400``) pass
        through untouched. Redirects are followed.

        Raises:
            UpstreamAppError: On non-2xx upstream status (carries the status).
            httpx.HTTPError: On transport failures (timeouts, connection errors).
            ValueError: If a successful response body is not valid JSON.
        """
        response = await self._http.get(self.build_url(city, api_key), follow_redirects=True)

        if not response.is_success:
            logger.error(
                "upstream.error",
                extra={"city": city, "upstream_status": response.status_code},
            )
            raise UpstreamAppError(
                code="upstream_error",
                message=f"Weather API returned {response.status_code}",
                details={"status": response.status_code},
            )

        response.json()
        return response.content

    async def aclose(self) -> None:
        await self._http.aclose()
