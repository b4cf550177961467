"""Tests for inventrack/middleware/rate_limit.py.

Covers:
- ``get_user_key``: key extraction from a Bearer JWT and the IP fallback
- ``rate_limit_exceeded_handler``: 429 envelope format and header injection
- ``limiter``: enforcement via the ``@limiter.limit()`` decorator
- the real ``/auth/register`` limit against the test database
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient
from httpx import AsyncClient
from jose import jwt as jose_jwt
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from inventrack.config import settings
from inventrack.middleware.rate_limit import (
    get_remote_address,
    get_user_key,
    limiter,
    rate_limit_exceeded_handler,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_access_token(user_id: str | None = None, **claims: Any) -> str:
    payload: dict[str, Any] = {"sub": user_id or str(uuid.uuid4()), "type": "access", **claims}
    return jose_jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _make_request(headers: dict[str, str] | None = None, client_host: str = "127.0.0.1") -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    scope: dict[str, Any] = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "headers": raw_headers,
        "client": (client_host, 12345),
    }
    return Request(scope)


def _make_app(limit: str = "2/minute") -> FastAPI:
    """Return a minimal FastAPI app with a fresh per-test limiter."""
    test_limiter = Limiter(key_func=get_remote_address, headers_enabled=True)
    app = FastAPI()
    app.state.limiter = test_limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    @app.get("/limited")
    @test_limiter.limit(limit)
    async def limited(request: Request, response: Response) -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/user-limited")
    @test_limiter.limit(limit, key_func=get_user_key)
    async def user_limited(request: Request, response: Response) -> dict[str, str]:
        return {"status": "ok"}

    return app


# ---------------------------------------------------------------------------
# get_user_key
# ---------------------------------------------------------------------------


class TestGetUserKey:
    def test_valid_bearer_jwt_returns_user_prefix(self) -> None:
        user_id = str(uuid.uuid4())
        request = _make_request({"Authorization": f"Bearer {_make_access_token(user_id)}"})
        assert get_user_key(request) == f"user:{user_id}"

    def test_bearer_prefix_required(self) -> None:
        request = _make_request({"Authorization": _make_access_token()}, client_host="10.0.0.2")
        assert get_user_key(request) == "10.0.0.2"

    def test_invalid_bearer_falls_back_to_ip(self) -> None:
        request = _make_request({"Authorization": "Bearer bad-token"}, client_host="192.168.1.1")
        assert get_user_key(request) == "192.168.1.1"

    def test_refresh_secret_token_falls_back_to_ip(self) -> None:
        token = jose_jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"},
            settings.jwt_refresh_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        request = _make_request({"Authorization": f"Bearer {token}"}, client_host="10.1.1.1")
        assert get_user_key(request) == "10.1.1.1"

    def test_non_access_token_type_falls_back_to_ip(self) -> None:
        token = _make_access_token(type="refresh")
        request = _make_request({"Authorization": f"Bearer {token}"}, client_host="10.1.1.2")
        assert get_user_key(request) == "10.1.1.2"

    def test_jwt_without_sub_falls_back_to_ip(self) -> None:
        token = jose_jwt.encode(
            {"type": "access"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
        )
        request = _make_request({"Authorization": f"Bearer {token}"}, client_host="10.2.2.2")
        assert get_user_key(request) == "10.2.2.2"

    def test_expired_jwt_still_returns_user_key(self) -> None:
        user_id = str(uuid.uuid4())
        token = _make_access_token(user_id, exp=datetime.now(UTC) - timedelta(hours=1))
        request = _make_request({"Authorization": f"Bearer {token}"})
        assert get_user_key(request) == f"user:{user_id}"

    def test_no_credentials_returns_ip(self) -> None:
        assert get_user_key(_make_request(client_host="10.0.0.1")) == "10.0.0.1"


# ---------------------------------------------------------------------------
# rate_limit_exceeded_handler
# ---------------------------------------------------------------------------


class TestRateLimitExceededHandler:
    @pytest.fixture
    def exhausted(self) -> TestClient:
        client = TestClient(_make_app(limit="1/minute"), raise_server_exceptions=False)
        client.get("/limited")
        return client

    def test_429_envelope(self, exhausted: TestClient) -> None:
        res = exhausted.get("/limited")
        assert res.status_code == 429
        assert res.json() == {
            "success": False,
            "message": "Too many requests, please try again later.",
            "error": "RATE_LIMITED",
        }

    def test_429_has_retry_after_header(self, exhausted: TestClient) -> None:
        res = exhausted.get("/limited")
        assert "retry-after" in res.headers


# ---------------------------------------------------------------------------
# Headers on normal responses and enforcement
# ---------------------------------------------------------------------------


class TestRateLimitHeaders:
    def test_headers_present_on_success(self) -> None:
        res = TestClient(_make_app(limit="100/minute")).get("/limited")
        assert res.status_code == 200
        assert res.headers["x-ratelimit-limit"] == "100"
        assert "x-ratelimit-remaining" in res.headers
        assert "x-ratelimit-reset" in res.headers

    def test_remaining_decrements_with_each_request(self) -> None:
        client = TestClient(_make_app(limit="100/minute"))
        r1 = client.get("/limited")
        r2 = client.get("/limited")
        assert int(r2.headers["x-ratelimit-remaining"]) < int(r1.headers["x-ratelimit-remaining"])


class TestRateLimitEnforcement:
    def test_request_beyond_limit_returns_429(self) -> None:
        client = TestClient(_make_app(limit="2/minute"), raise_server_exceptions=False)
        assert client.get("/limited").status_code == 200
        assert client.get("/limited").status_code == 200
        assert client.get("/limited").status_code == 429

    def test_user_key_isolates_per_user(self) -> None:
        client = TestClient(_make_app(limit="1/minute"), raise_server_exceptions=False)
        token1 = _make_access_token()
        token2 = _make_access_token()

        client.get("/user-limited", headers={"Authorization": f"Bearer {token1}"})
        r1 = client.get("/user-limited", headers={"Authorization": f"Bearer {token1}"})
        assert r1.status_code == 429

        r2 = client.get("/user-limited", headers={"Authorization": f"Bearer {token2}"})
        assert r2.status_code == 200


class TestLimiterExport:
    def test_limiter_configuration(self) -> None:
        assert isinstance(limiter, Limiter)
        assert limiter._headers_enabled is True
        assert limiter._key_func is get_remote_address


# ---------------------------------------------------------------------------
# Integration: real /auth/register endpoint (5/minute per IP)
# ---------------------------------------------------------------------------


def _registration() -> dict[str, str]:
    suffix = uuid.uuid4().hex[:8]
    return {"username": f"rl_{suffix}", "email": f"rl_{suffix}@test.com", "password": "secret1"}


@pytest.mark.asyncio
async def test_register_endpoint_rate_limit_returns_429_on_excess(
    async_client: AsyncClient,
) -> None:
    for _ in range(5):
        resp = await async_client.post("/api/v1/auth/register", json=_registration())
        assert resp.status_code == 201, resp.text

    resp = await async_client.post("/api/v1/auth/register", json=_registration())
    assert resp.status_code == 429
    assert resp.json()["error"] == "RATE_LIMITED"
    assert "retry-after" in resp.headers


@pytest.mark.asyncio
async def test_register_response_has_x_ratelimit_headers(async_client: AsyncClient) -> None:
    resp = await async_client.post("/api/v1/auth/register", json=_registration())
    assert resp.status_code == 201
    assert resp.headers["x-ratelimit-limit"] == "5"
