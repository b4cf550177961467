from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inventrack.config import settings
from inventrack.utils.db_url import asyncpg_engine_args

_url, _connect_args = asyncpg_engine_args(settings.database_url)

engine = create_async_engine(
    _url,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    connect_args=_connect_args,
)

# Objects stay usable after commit; services return them to the routers,
# which serialize them once the transaction has ended.
AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield a request-scoped session.

    Services commit explicitly. Anything left uncommitted when the request
    ends is rolled back as the session closes.
    """
    async with AsyncSessionLocal() as session:
        yield session
