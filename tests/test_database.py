import ssl

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from inventrack.database import AsyncSessionLocal, engine, get_db
from inventrack.utils.db_url import asyncpg_engine_args, with_async_driver, without_async_driver


def test_engine_is_async_engine():
    assert isinstance(engine, AsyncEngine)


def test_engine_has_pool_settings():
    pool = engine.pool
    assert pool.size() == 5  # type: ignore[attr-defined]


def test_async_session_factory_keeps_objects_after_commit():
    assert isinstance(AsyncSessionLocal, async_sessionmaker)
    assert AsyncSessionLocal.kw["expire_on_commit"] is False


@pytest.mark.parametrize(
    "url",
    [
        "postgres://u:p@host/db",
        "postgresql://u:p@host/db",
        "postgresql+asyncpg://u:p@host/db",
    ],
)
def test_with_async_driver(url):
    assert with_async_driver(url) == "postgresql+asyncpg://u:p@host/db"


def test_without_async_driver():
    assert without_async_driver("postgresql+asyncpg://u:p@host/db") == "postgresql://u:p@host/db"


def test_sslmode_require_encrypts_without_verifying():
    url, connect_args = asyncpg_engine_args("postgres://u:p@host/db?sslmode=require")
    assert url == "postgresql+asyncpg://u:p@host/db"
    ctx = connect_args["ssl"]
    assert isinstance(ctx, ssl.SSLContext)
    assert ctx.verify_mode == ssl.CERT_NONE
    assert ctx.check_hostname is False


def test_sslmode_verify_full_checks_host():
    _, connect_args = asyncpg_engine_args("postgresql://u:p@host/db?sslmode=verify-full")
    ctx = connect_args["ssl"]
    assert ctx.verify_mode == ssl.CERT_REQUIRED
    assert ctx.check_hostname is True


def test_sslmode_verify_ca_checks_chain_only():
    _, connect_args = asyncpg_engine_args("postgresql://u:p@host/db?sslmode=verify-ca")
    ctx = connect_args["ssl"]
    assert ctx.verify_mode == ssl.CERT_REQUIRED
    assert ctx.check_hostname is False


def test_sslmode_disable_adds_no_ssl():
    url, connect_args = asyncpg_engine_args("postgresql+asyncpg://u:p@host/db?sslmode=disable")
    assert url == "postgresql+asyncpg://u:p@host/db"
    assert connect_args == {}


def test_other_query_params_survive():
    url, _ = asyncpg_engine_args("postgresql://u:p@host/db?sslmode=require&application_name=inv")
    assert url == "postgresql+asyncpg://u:p@host/db?application_name=inv"


def test_url_without_query_is_unchanged():
    url, connect_args = asyncpg_engine_args("postgresql+asyncpg://u:p@host/db")
    assert url == "postgresql+asyncpg://u:p@host/db"
    assert connect_args == {}


@pytest.mark.asyncio
async def test_get_db_is_async_generator():
    gen = get_db()
    assert hasattr(gen, "__anext__")
    await gen.aclose()
