"""Tests for inventrack/api/users.py: admin-only user management."""

import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from inventrack.api.users import router as users_router
from inventrack.database import get_db
from inventrack.middleware.error_handler import register_exception_handlers
from inventrack.models import User
from inventrack.services.auth import create_access_token

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_user(*, role: str = "user", username: str = "alice") -> MagicMock:
    now = datetime.now(UTC)
    user = MagicMock(spec=User)
    user.id = uuid.uuid4()
    user.username = username
    user.email = f"{username}@example.com"
    user.role = role
    user.is_active = True
    user.created_at = now
    user.updated_at = now
    return user


def _make_app(db_mock: Any) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(users_router)

    async def override_get_db() -> AsyncGenerator[Any]:
        yield db_mock

    app.dependency_overrides[get_db] = override_get_db
    return app


def _db(*users: MagicMock) -> AsyncMock:
    by_id = {u.id: u for u in users}
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(side_effect=lambda _model, key: by_id.get(key))
    return db_mock


def _client(db_mock: AsyncMock) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=_make_app(db_mock)), base_url="http://test")


def _auth(user: MagicMock) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


# ---------------------------------------------------------------------------
# Access control
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_non_admin_gets_403() -> None:
    user = _make_user()
    async with _client(_db(user)) as client:
        response = await client.get("/users", headers=_auth(user))

    assert response.status_code == 403
    assert response.json()["message"] == "Insufficient permissions"


@pytest.mark.asyncio
async def test_unauthenticated_gets_401() -> None:
    async with _client(_db()) as client:
        response = await client.get("/users")
    assert response.status_code == 401


# ---------------------------------------------------------------------------
# GET /users
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_users_paginates() -> None:
    admin = _make_user(role="admin", username="root")
    others = [_make_user(username=f"user_{i}") for i in range(2)]
    count = MagicMock()
    count.scalar_one.return_value = 3
    page = MagicMock()
    page.scalars.return_value.all.return_value = [admin, *others]
    db_mock = _db(admin)
    db_mock.execute = AsyncMock(side_effect=[count, page])

    async with _client(db_mock) as client:
        response = await client.get("/users?role=user&limit=10", headers=_auth(admin))

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["users"]) == 3
    assert "password_hash" not in data["users"][0]
    assert data["pagination"]["items_per_page"] == 10


@pytest.mark.asyncio
async def test_get_user_not_found() -> None:
    admin = _make_user(role="admin")
    async with _client(_db(admin)) as client:
        response = await client.get(f"/users/{uuid.uuid4()}", headers=_auth(admin))

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


# ---------------------------------------------------------------------------
# PUT /users/{id}/role
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_promotes_user() -> None:
    admin = _make_user(role="admin", username="root")
    target = _make_user()
    db_mock = _db(admin, target)

    async with _client(db_mock) as client:
        response = await client.put(
            f"/users/{target.id}/role", json={"role": "admin"}, headers=_auth(admin)
        )

    assert response.status_code == 200
    assert response.json()["message"] == "User role updated successfully"
    assert target.role == "admin"
    db_mock.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_admin_cannot_change_own_role() -> None:
    admin = _make_user(role="admin")
    db_mock = _db(admin)

    async with _client(db_mock) as client:
        response = await client.put(
            f"/users/{admin.id}/role", json={"role": "user"}, headers=_auth(admin)
        )

    assert response.status_code == 403
    assert response.json()["message"] == "You cannot change the role of your own account"
    assert admin.role == "admin"
    db_mock.commit.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_role_returns_400() -> None:
    admin = _make_user(role="admin")
    async with _client(_db(admin)) as client:
        response = await client.put(
            f"/users/{uuid.uuid4()}/role", json={"role": "superuser"}, headers=_auth(admin)
        )

    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "role"


# ---------------------------------------------------------------------------
# PUT /users/{id}/status
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_deactivates_user() -> None:
    admin = _make_user(role="admin", username="root")
    target = _make_user()
    db_mock = _db(admin, target)

    async with _client(db_mock) as client:
        response = await client.put(
            f"/users/{target.id}/status", json={"is_active": False}, headers=_auth(admin)
        )

    assert response.status_code == 200
    assert response.json()["message"] == "User deactivated successfully"
    assert target.is_active is False


@pytest.mark.asyncio
async def test_admin_cannot_deactivate_self() -> None:
    admin = _make_user(role="admin")
    async with _client(_db(admin)) as client:
        response = await client.put(
            f"/users/{admin.id}/status", json={"is_active": False}, headers=_auth(admin)
        )

    assert response.status_code == 403
    assert admin.is_active is True
