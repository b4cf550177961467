"""Shared pytest fixtures for the InvenTrack test suite.

The module-level environment setup runs at collection time, before any
``inventrack.*`` module is imported, so pydantic-settings picks up the test
database URL and secrets rather than whatever a local ``.env`` contains.

Fixture scopes
--------------
* ``test_db``       session: create ``inventrack_test``, run migrations, drop.
                    Skips the requesting test when PostgreSQL is unreachable.
* ``async_client``  function: httpx client wrapping the full FastAPI app.
* ``register_user`` function: coroutine factory registering a user via the API.
* ``user_auth`` / ``admin_auth``  function: ``(headers, user_json)`` pairs.
* ``category_id``   function: an active category created through the API.
* ``reset_rate_limiter`` function, autouse: prevent cross-test counter bleed.
"""

import asyncio
import os
import subprocess
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from pathlib import Path
from typing import Any

import asyncpg
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

# ---------------------------------------------------------------------------
# Test database configuration
# ---------------------------------------------------------------------------

_TEST_DB_NAME = "inventrack_test"
_DB_HOST = os.getenv("DB_HOST", "localhost")
_DB_PORT = os.getenv("DB_PORT", "5432")
_DB_USER = os.getenv("DB_USER", "postgres")
_DB_PASSWORD = os.getenv("DB_PASSWORD", "postgres")
# Connect to this existing DB to run CREATE / DROP DATABASE statements.
_DB_ADMIN_DB = os.getenv("DB_ADMIN_DB", "postgres")

_TEST_DB_URL = (
    f"postgresql+asyncpg://{_DB_USER}:{_DB_PASSWORD}@{_DB_HOST}:{_DB_PORT}/{_TEST_DB_NAME}"
)
# Plain asyncpg URL (no "+asyncpg" driver qualifier) used for admin connections.
_TEST_ADMIN_CONN_URL = (
    f"postgresql://{_DB_USER}:{_DB_PASSWORD}@{_DB_HOST}:{_DB_PORT}/{_DB_ADMIN_DB}"
)

_PROJECT_ROOT = Path(__file__).resolve().parents[1]

# ---------------------------------------------------------------------------
# Environment bootstrap: must run before any ``inventrack.*`` import
# ---------------------------------------------------------------------------

# Override (not setdefault) so tests never accidentally hit the dev DB.
os.environ["DATABASE_URL"] = _TEST_DB_URL
os.environ.setdefault("JWT_SECRET_KEY", "test-access-secret-key")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret-key")
# Cheap hashes keep the suite fast; production default is 12.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

# ---------------------------------------------------------------------------
# Rate-limiter reset: prevents cross-test pollution of in-memory counters
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Reset the in-memory rate-limit storage before every test.

    Without this, low-limit endpoints (register: 5/minute) exhaust their quota
    during the test run.
    """
    from inventrack.middleware.rate_limit import limiter

    limiter._storage.reset()


# ---------------------------------------------------------------------------
# Session: create test database + run Alembic migrations
# ---------------------------------------------------------------------------


async def _recreate_db(create: bool) -> None:
    conn = await asyncpg.connect(_TEST_ADMIN_CONN_URL, timeout=5)
    try:
        # Terminate lingering connections from a previous failed run.
        await conn.execute(
            "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
            "WHERE datname = $1 AND pid <> pg_backend_pid()",
            _TEST_DB_NAME,
        )
        await conn.execute(f'DROP DATABASE IF EXISTS "{_TEST_DB_NAME}"')
        if create:
            await conn.execute(f'CREATE DATABASE "{_TEST_DB_NAME}"')
    finally:
        await conn.close()


@pytest.fixture(scope="session")
def test_db() -> Generator[str]:
    """Create ``inventrack_test``, run Alembic migrations, yield the URL.

    Uses :func:`asyncio.run` for admin operations so this synchronous
    session-scoped fixture avoids event-loop conflicts with pytest-asyncio's
    per-function loops. The database is dropped on teardown.
    """
    try:
        asyncio.run(_recreate_db(create=True))
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as exc:
        pytest.skip(f"PostgreSQL not reachable for integration tests: {exc}")

    subprocess.run(
        ["alembic", "upgrade", "head"],
        check=True,
        capture_output=True,
        cwd=_PROJECT_ROOT,
        env={**os.environ, "DATABASE_URL_DIRECT": _TEST_DB_URL},
    )

    yield _TEST_DB_URL

    asyncio.run(_recreate_db(create=False))


# ---------------------------------------------------------------------------
# Function: async HTTP client backed by the real FastAPI app
# ---------------------------------------------------------------------------


@pytest.fixture
async def async_client(test_db: str) -> AsyncGenerator[AsyncClient]:  # noqa: ARG001
    """httpx.AsyncClient that drives the full FastAPI app in-process.

    ``ASGITransport`` does not run the lifespan, so the pooled connections are
    disposed here; each test gets its own event loop and must not inherit
    connections bound to a previous one.
    """
    from inventrack.database import AsyncSessionLocal, engine
    from inventrack.main import app

    async with AsyncSessionLocal() as session:
        await session.execute(
            text("TRUNCATE inventory_movements, products, categories, users CASCADE")
        )
        await session.commit()

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    await engine.dispose()


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

RegisterUser = Callable[..., Awaitable[tuple[dict[str, str], dict[str, Any]]]]


@pytest.fixture
def register_user(async_client: AsyncClient) -> RegisterUser:
    """Return a coroutine that registers a user and optionally promotes it.

    The coroutine returns ``(auth_headers, user_json)``. There is no API to
    create an admin, so promotion is done directly in the database followed
    by a fresh login.
    """
    from inventrack.database import AsyncSessionLocal

    async def _register(
        *,
        username: str | None = None,
        password: str = "secret1",
        role: str = "user",
    ) -> tuple[dict[str, str], dict[str, Any]]:
        username = username or f"user_{uuid.uuid4().hex[:8]}"
        email = f"{username.lower()}@test.com"
        reg = await async_client.post(
            "/api/v1/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert reg.status_code == 201, f"Registration failed: {reg.text}"

        if role != "user":
            async with AsyncSessionLocal() as session:
                await session.execute(
                    text("UPDATE users SET role = :role WHERE email = :email"),
                    {"role": role, "email": email},
                )
                await session.commit()

        login = await async_client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
        )
        assert login.status_code == 200, f"Login failed: {login.text}"
        data = login.json()["data"]
        return {"Authorization": f"Bearer {data['tokens']['access_token']}"}, data["user"]

    return _register


@pytest.fixture
async def user_auth(register_user: RegisterUser) -> tuple[dict[str, str], dict[str, Any]]:
    return await register_user()


@pytest.fixture
async def admin_auth(register_user: RegisterUser) -> tuple[dict[str, str], dict[str, Any]]:
    return await register_user(role="admin")


@pytest.fixture
async def category_id(
    async_client: AsyncClient,
    user_auth: tuple[dict[str, str], dict[str, Any]],
) -> str:
    headers, _ = user_auth
    resp = await async_client.post(
        "/api/v1/categories",
        json={"name": f"Hardware {uuid.uuid4().hex[:6]}", "description": "Nuts and bolts"},
        headers=headers,
    )
    assert resp.status_code == 201, f"Category creation failed: {resp.text}"
    return resp.json()["data"]["category"]["id"]
