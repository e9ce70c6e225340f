# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for CorsFilter inside the filter chain built by create_app()."""

from __future__ import annotations

import pytest
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from corsfly.kernel.exceptions import CorsConfigurationException
from corsfly.web.adapters.starlette.app import create_app
from corsfly.web.adapters.starlette.filters import CorsFilter, create_cors_filter
from corsfly.web.cors import CORSConfig

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _Calls:
    def __init__(self) -> None:
        self.count = 0


def _make_client(cors, calls: _Calls | None = None) -> TestClient:
    calls = calls if calls is not None else _Calls()

    async def hello(request: Request) -> JSONResponse:
        calls.count += 1
        return JSONResponse({"msg": "hello"})

    async def tagged(request: Request) -> PlainTextResponse:
        calls.count += 1
        return PlainTextResponse("tagged", headers={"Access-Control-Allow-Origin": "https://own.dev"})

    async def boom(request: Request) -> PlainTextResponse:
        raise RuntimeError("handler exploded")

    app = create_app(
        title="test",
        cors=cors,
        extra_routes=[
            Route("/x", hello, methods=["GET", "POST", "OPTIONS"]),
            Route("/hello", hello),
            Route("/tagged", tagged),
            Route("/boom", boom),
        ],
    )
    return TestClient(app)


# ---------------------------------------------------------------------------
# Origin resolution
# ---------------------------------------------------------------------------


class TestAllowOrigin:
    def test_wildcard_echoes_origin(self):
        client = _make_client(CORSConfig(origin="*"))
        resp = client.get("/hello", headers={"Origin": "https://example.com"})

        assert resp.status_code == 200
        assert resp.json() == {"msg": "hello"}
        assert resp.headers["access-control-allow-origin"] == "https://example.com"

    def test_wildcard_without_origin_header(self):
        client = _make_client(CORSConfig(origin="*"))
        resp = client.get("/hello")

        assert resp.headers["access-control-allow-origin"] == "*"

    def test_literal_origin_regardless_of_request(self):
        client = _make_client(CORSConfig(origin="https://a.com"))

        for origin in ("https://example.com", "https://a.com"):
            resp = client.get("/hello", headers={"Origin": origin})
            assert resp.headers["access-control-allow-origin"] == "https://a.com"
        assert client.get("/hello").headers["access-control-allow-origin"] == "https://a.com"

    def test_dynamic_origin_sees_request(self):
        def allow_dev(request):
            origin = request.headers.get("origin", "")
            return origin if origin.endswith(".dev") else None

        client = _make_client(CORSConfig(origin=allow_dev))

        allowed = client.get("/hello", headers={"Origin": "https://app.dev"})
        denied = client.get("/hello", headers={"Origin": "https://other.com"})

        assert allowed.headers["access-control-allow-origin"] == "https://app.dev"
        assert "access-control-allow-origin" not in denied.headers
        assert denied.status_code == 200

    def test_dynamic_origin_error_propagates(self):
        def broken(request):
            raise LookupError("tenant registry down")

        client = _make_client(CORSConfig(origin=broken))
        with pytest.raises(LookupError, match="tenant registry down"):
            client.get("/hello", headers={"Origin": "https://app.dev"})


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------


class TestPreflight:
    def test_end_to_end_preflight(self):
        calls = _Calls()
        client = _make_client(
            {"origin": "*", "allowMethods": ["GET", "POST"], "credentials": True, "maxAge": 600},
            calls,
        )
        resp = client.options("/x", headers={"Origin": "https://app.dev"})

        assert resp.status_code == 204
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] == "https://app.dev"
        assert resp.headers["access-control-allow-methods"] == "GET, POST"
        assert resp.headers["access-control-max-age"] == "600"
        assert resp.headers["access-control-allow-credentials"] == "true"
        assert calls.count == 0

    def test_preflight_short_circuits_unrouted_path(self):
        client = _make_client(CORSConfig())
        resp = client.options("/nowhere", headers={"Origin": "https://app.dev"})

        assert resp.status_code == 204

    def test_preflight_never_calls_handler_that_raises(self):
        client = _make_client(CORSConfig())
        resp = client.options("/boom")

        assert resp.status_code == 204

    def test_empty_allow_methods_suppressed(self):
        client = _make_client(CORSConfig(allow_methods=[]))
        resp = client.options("/x", headers={"Origin": "https://app.dev"})

        assert resp.status_code == 204
        assert "access-control-allow-methods" not in resp.headers

    def test_max_age_zero_suppressed(self):
        client = _make_client(CORSConfig(max_age=0))
        resp = client.options("/x")

        assert "access-control-max-age" not in resp.headers

    def test_max_age_emitted(self):
        client = _make_client(CORSConfig(max_age=3600))
        resp = client.options("/x")

        assert resp.headers["access-control-max-age"] == "3600"

    def test_preflight_does_not_expose_headers(self):
        client = _make_client(CORSConfig(expose_headers=["ETag"]))
        resp = client.options("/x")

        assert "access-control-expose-headers" not in resp.headers


# ---------------------------------------------------------------------------
# Actual requests
# ---------------------------------------------------------------------------


class TestActualRequest:
    def test_expose_headers(self):
        client = _make_client(CORSConfig(expose_headers=["ETag", "X-Total-Count"]))
        resp = client.get("/hello", headers={"Origin": "https://example.com"})

        assert resp.headers["access-control-expose-headers"] == "ETag, X-Total-Count"
        assert "access-control-allow-methods" not in resp.headers
        assert "access-control-max-age" not in resp.headers

    def test_no_expose_header_when_empty(self):
        client = _make_client(CORSConfig())
        resp = client.get("/hello")

        assert "access-control-expose-headers" not in resp.headers

    def test_handler_is_called_once(self):
        calls = _Calls()
        client = _make_client(CORSConfig(), calls)
        client.post("/x", headers={"Origin": "https://example.com"})

        assert calls.count == 1

    def test_downstream_header_wins(self):
        client = _make_client(CORSConfig(origin="https://a.com"))
        resp = client.get("/tagged")

        assert resp.headers["access-control-allow-origin"] == "https://own.dev"

    def test_status_is_left_to_handler(self):
        client = _make_client(CORSConfig())
        resp = client.get("/missing", headers={"Origin": "https://example.com"})

        assert resp.status_code == 404
        assert resp.headers["access-control-allow-origin"] == "https://example.com"

    def test_handler_error_propagates(self):
        client = _make_client(CORSConfig())
        with pytest.raises(RuntimeError, match="handler exploded"):
            client.get("/boom")


class TestCredentials:
    @pytest.mark.parametrize("method", ["GET", "OPTIONS"])
    def test_credentials_on_every_response(self, method):
        client = _make_client(CORSConfig(credentials=True))
        resp = client.request(method, "/x", headers={"Origin": "https://example.com"})

        assert resp.headers["access-control-allow-credentials"] == "true"

    @pytest.mark.parametrize("method", ["GET", "OPTIONS"])
    def test_credentials_absent_when_disabled(self, method):
        client = _make_client(CORSConfig(credentials=False))
        resp = client.request(method, "/x", headers={"Origin": "https://example.com"})

        assert "access-control-allow-credentials" not in resp.headers


# ---------------------------------------------------------------------------
# Enabling / disabling
# ---------------------------------------------------------------------------


class TestCorsToggle:
    @pytest.mark.parametrize("cors", [None, False, {"enabled": False, "origin": "*"}])
    def test_disabled_is_passthrough(self, cors):
        client = _make_client(cors)
        resp = client.get("/hello", headers={"Origin": "https://example.com"})

        assert resp.status_code == 200
        assert "access-control-allow-origin" not in resp.headers

    def test_disabled_options_reach_the_route(self):
        calls = _Calls()
        client = _make_client(None, calls)
        resp = client.options("/x")

        assert resp.status_code == 200
        assert calls.count == 1

    def test_true_uses_defaults(self):
        client = _make_client(True)
        resp = client.options("/x", headers={"Origin": "https://example.com"})

        assert resp.status_code == 204
        assert resp.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, PATCH, OPTIONS"
        assert resp.headers["access-control-max-age"] == "86400"

    def test_invalid_options_fail_at_startup(self):
        with pytest.raises(CorsConfigurationException):
            create_app(cors=["*"])


class TestCreateCorsFilter:
    def test_default_is_enabled(self):
        cors_filter = create_cors_filter()
        assert isinstance(cors_filter, CorsFilter)
        assert cors_filter.policy.config == CORSConfig()

    def test_config_instance_used_as_is(self):
        config = CORSConfig(origin="https://a.com")
        assert create_cors_filter(config).policy.config is config

    def test_mapping_merged_with_defaults(self):
        cors_filter = create_cors_filter({"origin": "https://a.com", "credentials": True})

        assert cors_filter.policy.config.origin == "https://a.com"
        assert cors_filter.policy.config.credentials is True
        assert cors_filter.policy.config.max_age == 86400

    @pytest.mark.parametrize("options", [None, False, {"enabled": False}])
    def test_disabled_returns_none(self, options):
        assert create_cors_filter(options) is None

    def test_unknown_option_rejected(self):
        with pytest.raises(CorsConfigurationException):
            create_cors_filter({"allowedOrigins": ["*"]})

    def test_path_patterns_passed_to_filter(self):
        cors_filter = create_cors_filter(True, url_patterns=["/api/*"], exclude_patterns=["/api/internal*"])

        assert cors_filter.url_patterns == ["/api/*"]
        assert cors_filter.exclude_patterns == ["/api/internal*"]


# ---------------------------------------------------------------------------
# Path patterns
# ---------------------------------------------------------------------------


class TestPathPatterns:
    @pytest.fixture
    def client(self) -> TestClient:
        async def ok(request: Request) -> PlainTextResponse:
            return PlainTextResponse("ok")

        cors_filter = CorsFilter(CORSConfig(), url_patterns=["/api/*"], exclude_patterns=["/api/internal*"])
        app = create_app(
            filters=[cors_filter],
            extra_routes=[
                Route("/api/data", ok),
                Route("/api/internal/stats", ok),
                Route("/page", ok),
            ],
        )
        return TestClient(app)

    def test_matching_path_gets_headers(self, client):
        resp = client.get("/api/data", headers={"Origin": "https://a.com"})
        assert resp.headers["access-control-allow-origin"] == "https://a.com"

    def test_non_matching_path_passes_through(self, client):
        resp = client.get("/page", headers={"Origin": "https://a.com"})

        assert resp.text == "ok"
        assert "access-control-allow-origin" not in resp.headers

    def test_excluded_path_passes_through(self, client):
        resp = client.get("/api/internal/stats", headers={"Origin": "https://a.com"})
        assert "access-control-allow-origin" not in resp.headers

    def test_preflight_outside_patterns_reaches_router(self, client):
        resp = client.options("/page")

        assert resp.status_code == 405
        assert "access-control-allow-methods" not in resp.headers

    def test_preflight_inside_patterns_short_circuits(self, client):
        resp = client.options("/api/data")

        assert resp.status_code == 204
        assert resp.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, PATCH, OPTIONS"
