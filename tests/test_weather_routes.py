"""HTTP tests for the weather endpoint.

The weather API is stubbed with httpx.MockTransport, counters live in the
in-memory store and time is a Mock clock, so every test is deterministic.
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from weather_edge.adapters.secrets.providers import StaticSecretProvider
from weather_edge.core.config import AppSettings, WeatherSettings


# ======================== Successful lookups ========================


class TestWeatherLookup:
    def test_city_query_returns_upstream_json(self, client, upstream):
        resp = client.get("/", params={"city": "Shanghai"})

        assert resp.status_code == 200
        assert resp.json() == {"temp": 20}
        assert resp.headers["content-type"] == "application/json"
        assert resp.headers["X-RateLimit-Limit"] == "3"
        assert resp.headers["X-RateLimit-Remaining"] == "2"

        assert len(upstream.requests) == 1
        params = upstream.requests[0].url.params
        assert params["q"] == "Shanghai"
        assert params["appid"] == "test-weather-key"
        assert params["units"] == "metric"
        assert params["lang"] == "zh_cn"
        assert upstream.requests[0].url.path == "/data/2.5/weather"

    def test_missing_city_defaults_to_beijing(self, client, upstream):
        resp = client.get("/")

        assert resp.status_code == 200
        assert upstream.requests[0].url.params["q"] == "Beijing"

    def test_empty_city_defaults_to_beijing(self, client, upstream):
        client.get("/", params={"city": ""})

        assert upstream.requests[0].url.params["q"] == "Beijing"

    def test_city_is_percent_encoded(self, client, upstream):
        client.get("/", params={"city": "New York"})

        raw_url = str(upstream.requests[0].url)
        assert "q=New%20York" in raw_url
        assert upstream.requests[0].url.params["q"] == "New York"

    def test_non_ascii_city_is_passed_through(self, client, upstream):
        upstream.payload = {"name": "上海", "main": {"temp": 21.5}}

        resp = client.get("/", params={"city": "上海"})

        assert resp.status_code == 200
        assert resp.json() == {"name": "上海", "main": {"temp": 21.5}}
        assert upstream.requests[0].url.params["q"] == "上海"

    def test_post_behaves_like_get(self, client, upstream):
        resp = client.post("/?city=Paris")

        assert resp.status_code == 200
        assert upstream.requests[0].url.params["q"] == "Paris"

    def test_repeated_city_uses_first_value(self, client, upstream):
        resp = client.get("/?city=Paris&city=London")

        assert resp.status_code == 200
        assert upstream.requests[0].url.params["q"] == "Paris"

    def test_upstream_body_is_passed_through_byte_for_byte(self, client, upstream):
        upstream.content = b'{"v": 1e400,  "name": "Oslo"}'

        resp = client.get("/", params={"city": "Oslo"})

        assert resp.status_code == 200
        assert resp.content == b'{"v": 1e400,  "name": "Oslo"}'
        assert resp.headers["content-type"] == "application/json"
        assert resp.headers["X-RateLimit-Remaining"] == "2"


# ======================== Rate limiting ========================


class TestRateLimiting:
    def test_remaining_counts_down_then_429(self, client, upstream):
        remaining = [client.get("/").headers["X-RateLimit-Remaining"] for _ in range(3)]
        assert remaining == ["2", "1", "0"]

        resp = client.get("/")

        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "60"
        assert resp.headers["X-RateLimit-Limit"] == "3"
        assert resp.headers["X-RateLimit-Remaining"] == "0"
        body = resp.json()
        assert body["retryAfter"] == 60
        assert body["error"]
        assert len(upstream.requests) == 3

    def test_denied_requests_do_not_touch_counter(self, client, store):
        for _ in range(3):
            client.get("/")
        for _ in range(5):
            assert client.get("/").status_code == 429

        assert store._entries["rate_limit:unknown:20000"].value == "3"

    def test_next_window_resets_quota(self, client, clock):
        for _ in range(3):
            client.get("/")
        assert client.get("/").status_code == 429

        clock.return_value += 60

        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.headers["X-RateLimit-Remaining"] == "2"

    def test_buckets_are_keyed_by_proxy_ip_header(self, client, store):
        for _ in range(3):
            client.get("/", headers={"CF-Connecting-IP": "203.0.113.7"})
        assert client.get("/", headers={"CF-Connecting-IP": "203.0.113.7"}).status_code == 429

        other = client.get("/", headers={"CF-Connecting-IP": "198.51.100.1"})
        assert other.status_code == 200
        assert other.headers["X-RateLimit-Remaining"] == "2"

        anonymous = client.get("/")
        assert anonymous.status_code == 200
        assert store._entries["rate_limit:unknown:20000"].value == "1"

    def test_configured_limit_is_reported(self, make_client):
        client = make_client(app_settings=AppSettings(rate_limit_requests=30))

        resp = client.get("/")

        assert resp.headers["X-RateLimit-Limit"] == "30"
        assert resp.headers["X-RateLimit-Remaining"] == "29"


# ======================== Preflight and CORS ========================


class TestCors:
    def test_options_is_answered_without_side_effects(self, client, upstream, store):
        resp = client.options("/", headers={"Origin": "http://localhost:5173"})

        assert resp.status_code == 204
        assert resp.content == b""
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
        assert resp.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
        assert resp.headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"
        assert resp.headers["Access-Control-Max-Age"] == "86400"
        assert upstream.requests == []
        assert len(store) == 0

    def test_options_on_any_path_is_a_preflight(self, client):
        assert client.options("/anything").status_code == 204

    @pytest.mark.parametrize(
        ("headers", "expected"),
        [
            ({"Origin": "http://localhost:5173"}, "http://localhost:5173"),
            ({"Origin": "http://127.0.0.1:8080"}, "http://127.0.0.1:8080"),
            ({"Origin": "http://evil.example"}, "*"),
            ({}, "*"),
        ],
    )
    def test_allow_origin(self, client, headers, expected):
        resp = client.get("/", headers=headers)

        assert resp.headers["Access-Control-Allow-Origin"] == expected

    def test_error_responses_carry_cors_headers(self, client):
        resp = client.get("/nope", headers={"Origin": "http://localhost:3000"})

        assert resp.status_code == 404
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


# ======================== Path and method checks ========================


class TestPathCheck:
    def test_unknown_path_returns_404(self, client, upstream, store):
        resp = client.get("/forecast")

        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Not Found"
        assert "/forecast" in body["message"]
        assert upstream.requests == []
        assert len(store) == 0

    def test_path_check_can_be_disabled(self, make_client, upstream):
        client = make_client(app_settings=AppSettings(enforce_root_path=False))

        resp = client.get("/weather", params={"city": "Tokyo"})

        assert resp.status_code == 200
        assert upstream.requests[0].url.params["q"] == "Tokyo"

    def test_unsupported_method_returns_json_405(self, client, upstream, store):
        resp = client.delete("/")

        assert resp.status_code == 405
        assert resp.json()["error"] == "Method Not Allowed"
        assert resp.headers["Allow"] == "GET, POST, OPTIONS"
        assert upstream.requests == []
        assert len(store) == 0

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_unknown_path_is_404_for_any_method(self, client, method):
        resp = client.request(method, "/forecast")

        assert resp.status_code == 404
        assert resp.json()["error"] == "Not Found"


# ======================== Credential failures ========================


class TestCredentialResolution:
    def test_missing_binding_returns_500_without_upstream_call(self, make_client, upstream, store):
        client = make_client(weather_settings=WeatherSettings(api_key=None))

        resp = client.get("/", params={"city": "Shanghai"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Configuration Error",
            "message": "WEATHER_API_KEY is not configured",
        }
        assert upstream.requests == []
        assert len(store) == 0

    def test_empty_key_returns_500(self, make_client, upstream):
        client = make_client(weather_settings=WeatherSettings(api_key=""))

        resp = client.get("/")

        assert resp.status_code == 500
        assert resp.json()["message"] == "WEATHER_API_KEY is empty"
        assert upstream.requests == []

    def test_unsupported_source_returns_500(self, make_client, upstream):
        client = make_client(weather_settings=WeatherSettings(api_key_source="vault"))

        resp = client.get("/")

        assert resp.status_code == 500
        assert "unsupported source" in resp.json()["message"]
        assert upstream.requests == []

    def test_failed_retrieval_returns_500(self, make_client, upstream):
        provider = StaticSecretProvider("unused")
        provider.get = AsyncMock(side_effect=RuntimeError("secret store unavailable"))
        client = make_client(secret_provider_factory=lambda: provider)

        resp = client.get("/")

        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Configuration Error"
        assert "secret store unavailable" in body["message"]
        assert upstream.requests == []

    def test_injected_provider_is_used(self, make_client, upstream):
        client = make_client(secret_provider_factory=lambda: StaticSecretProvider("rotated-key"))

        client.get("/")

        assert upstream.requests[0].url.params["appid"] == "rotated-key"


# ======================== Upstream failures ========================


class TestUpstreamFailures:
    @pytest.mark.parametrize("status_code", [401, 404, 500, 503])
    def test_non_success_status_returns_502(self, client, upstream, status_code):
        upstream.status_code = status_code
        upstream.payload = {"cod": str(status_code), "message": "city not found"}

        resp = client.get("/", params={"city": "Atlantis"})

        assert resp.status_code == 502
        assert resp.json() == {"error": "Weather API Error", "status": status_code}

    def test_invalid_json_returns_500(self, client, upstream):
        upstream.content = b"<html>oops</html>"

        resp = client.get("/")

        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Internal Error"
        assert body["message"]

    def test_network_error_returns_500(self, client, upstream):
        upstream.error = httpx.ConnectError("connection refused")

        resp = client.get("/")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal Error", "message": "connection refused"}

    def test_failed_upstream_call_still_consumes_quota(self, client, upstream):
        upstream.status_code = 500

        client.get("/")
        resp = client.get("/")

        assert resp.status_code == 502
        upstream.status_code = 200
        assert client.get("/").headers["X-RateLimit-Remaining"] == "0"
