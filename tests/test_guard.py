"""
Tests for the inbound API key guard and its middleware.
"""

import json

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from secure_server_fetch.api_keys import (
    ApiKeyMiddleware,
    GuardOutcome,
    KEY_REQUIREMENTS,
    KeyGuard,
    check_api_key,
    require_api_key,
)
from secure_server_fetch.errors import ConfigurationError

EXPECTED_KEY = "Abcdefghij1234567890Abcdefghij12345"  # 35 chars


def make_request(api_key=None) -> Request:
    headers = []
    if api_key is not None:
        headers.append((b"x-api-key", api_key.encode()))
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/api/items",
        "headers": headers,
    })


class TestKeyGuardConfiguration:
    """Misconfigured expected keys must fail loudly."""

    @pytest.mark.parametrize("expected", ["", "   ", "\n\t"])
    def test_blank_expected_key(self, expected):
        with pytest.raises(ConfigurationError, match="Expected API key cannot be empty"):
            KeyGuard(expected)

    def test_weak_expected_key(self):
        with pytest.raises(
            ConfigurationError,
            match="Expected API key does not meet security requirements",
        ):
            KeyGuard("invalid-key")

    def test_require_api_key_raises_for_weak_expected_key(self):
        """Misconfiguration is raised even when the header is absent."""
        with pytest.raises(ConfigurationError):
            require_api_key(make_request(), "invalid-key")


class TestKeyGuardCheck:
    """Tests for each guard outcome."""

    def test_missing_header(self):
        """Absent header should yield MISSING_KEY with requirements."""
        decision = check_api_key(None, EXPECTED_KEY)

        assert decision.outcome is GuardOutcome.MISSING_KEY
        assert decision.status_code == 401
        assert decision.body["error"] == "API key is missing"
        assert decision.body["requirements"] == KEY_REQUIREMENTS

    @pytest.mark.parametrize("provided", ["", "   ", " \t\n "])
    def test_blank_header(self, provided):
        """Header that sanitizes to nothing should yield EMPTY_KEY."""
        decision = check_api_key(provided, EXPECTED_KEY)

        assert decision.outcome is GuardOutcome.EMPTY_KEY
        assert decision.status_code == 401
        assert decision.body["error"] == "API key cannot be empty"
        assert set(decision.body["requirements"]) == {"format", "characters", "complexity"}

    def test_malformed_lowercase_key(self):
        """A 35-char lowercase key should report the complexity rule."""
        decision = check_api_key("a" * 35, EXPECTED_KEY)

        assert decision.outcome is GuardOutcome.MALFORMED_KEY
        assert decision.status_code == 401
        assert decision.body["message"] == (
            "API key must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
        assert "requirements" in decision.body

    def test_malformed_short_key(self):
        """Short keys should report the length rule."""
        decision = check_api_key("wrongkey", EXPECTED_KEY)

        assert decision.outcome is GuardOutcome.MALFORMED_KEY
        assert decision.body["message"] == "API key must be at least 32 characters long"

    def test_mismatch_has_no_requirements(self):
        """A strong but wrong key should get a generic body."""
        decision = check_api_key("Zyxwvutsrq0987654321Zyxwvutsrq09876", EXPECTED_KEY)

        assert decision.outcome is GuardOutcome.MISMATCH
        assert decision.status_code == 401
        assert decision.body == {
            "error": "Invalid API key",
            "message": "The provided API key is not valid",
        }

    def test_matching_key_passes(self):
        """Identical strong keys should pass without a body."""
        decision = check_api_key(EXPECTED_KEY, EXPECTED_KEY)

        assert decision.passed
        assert decision.body is None
        assert decision.to_response() is None

    def test_whitespace_is_ignored_on_both_sides(self):
        """Keys are compared after whitespace removal."""
        spaced = EXPECTED_KEY[:10] + " " + EXPECTED_KEY[10:] + "\n"

        assert check_api_key(spaced, " " + EXPECTED_KEY).passed


class TestRequireApiKey:
    """Tests for the Starlette request helper."""

    def test_pass_returns_none(self):
        assert require_api_key(make_request(EXPECTED_KEY), EXPECTED_KEY) is None

    def test_missing_returns_401_json(self):
        response = require_api_key(make_request(), EXPECTED_KEY)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 401
        assert response.headers["content-type"] == "application/json"
        body = json.loads(response.body)
        assert body["error"] == "API key is missing"
        assert b'"error":"API key is missing"' in response.body

    def test_wrong_key_returns_401(self):
        response = require_api_key(make_request("wrongkey"), EXPECTED_KEY)

        assert response.status_code == 401


def create_client(**middleware_kwargs) -> TestClient:
    async def items(request):
        return JSONResponse({"status": "ok"})

    async def health(request):
        return JSONResponse({"status": "healthy"})

    app = Starlette(routes=[
        Route("/api/items", items),
        Route("/health", health),
    ])
    app.add_middleware(ApiKeyMiddleware, expected_key=EXPECTED_KEY, **middleware_kwargs)
    return TestClient(app)


class TestApiKeyMiddleware:
    """Tests for the ASGI middleware."""

    def test_blocks_missing_key(self):
        response = create_client().get("/api/items")

        assert response.status_code == 401
        assert response.json()["error"] == "API key is missing"

    def test_allows_valid_key(self):
        response = create_client().get("/api/items", headers={"x-api-key": EXPECTED_KEY})

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_header_name_is_case_insensitive(self):
        response = create_client().get("/api/items", headers={"X-API-Key": EXPECTED_KEY})

        assert response.status_code == 200

    def test_public_path_bypasses_guard(self):
        response = create_client().get("/health")

        assert response.status_code == 200

    def test_weak_expected_key_fails_at_startup(self):
        async def items(request):
            return JSONResponse({})

        app = Starlette(routes=[Route("/api/items", items)])
        app.add_middleware(ApiKeyMiddleware, expected_key="short")

        with pytest.raises(ConfigurationError):
            TestClient(app).get("/api/items")
