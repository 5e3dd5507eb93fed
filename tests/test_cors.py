"""
Tests for the cross-origin policy.
"""

import pytest

from api.middleware import is_origin_allowed

FRONTEND = "https://app.example.com"


class TestIsOriginAllowed:
    def test_no_origin(self):
        assert is_origin_allowed(None, FRONTEND)
        assert is_origin_allowed("", None)

    @pytest.mark.parametrize("origin", [FRONTEND, FRONTEND + "/", FRONTEND + "//"])
    def test_frontend_exact_match_ignoring_trailing_slashes(self, origin):
        assert is_origin_allowed(origin, FRONTEND + "/")

    @pytest.mark.parametrize("origin", ["http://localhost", "http://localhost:3000", "http://localhost:5173/"])
    def test_localhost_any_port(self, origin):
        assert is_origin_allowed(origin, None)

    @pytest.mark.parametrize(
        "origin",
        [
            "https://localhost:3000",
            "http://localhost.evil.com",
            "http://127.0.0.1:3000",
            "https://app.example.com.evil.com",
            "http://app.example.com",
        ],
    )
    def test_everything_else_rejected(self, origin):
        assert not is_origin_allowed(origin, FRONTEND)

    def test_no_frontend_configured(self):
        assert not is_origin_allowed(FRONTEND, None)


class TestCorsMiddleware:
    def _preflight(self, client, origin):
        return client.options(
            "/api/tasks",
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )

    def test_preflight_from_frontend(self, client):
        response = self._preflight(client, FRONTEND)
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == FRONTEND
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_preflight_from_localhost(self, client):
        response = self._preflight(client, "http://localhost:3000")
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_preflight_from_other_origin_rejected(self, client):
        response = self._preflight(client, "https://evil.example.org")
        assert response.status_code == 400
        assert "access-control-allow-origin" not in response.headers

    def test_simple_request_without_origin(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers

    def test_simple_request_from_other_origin_gets_no_cors_headers(self, client):
        response = client.get("/", headers={"Origin": "https://evil.example.org"})
        assert "access-control-allow-origin" not in response.headers

    def test_new_token_header_is_exposed(self, client):
        response = client.get("/", headers={"Origin": FRONTEND})
        assert response.headers["access-control-allow-origin"] == FRONTEND
        assert "X-New-Token" in response.headers["access-control-expose-headers"]
