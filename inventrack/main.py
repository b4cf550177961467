import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventrack.api.router import api_router
from inventrack.config import settings
from inventrack.database import engine
from inventrack.middleware.access_log import AccessLogMiddleware
from inventrack.middleware.error_handler import register_exception_handlers
from inventrack.middleware.rate_limit import limiter
from inventrack.middleware.request_id import RequestIdMiddleware
from inventrack.middleware.timeout import TimeoutMiddleware

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

_OPENAPI_TAGS = [
    {"name": "Health", "description": "Liveness and readiness probes"},
    {"name": "Auth", "description": "Registration, login, tokens and profile"},
    {"name": "Users", "description": "User administration (admin only)"},
    {"name": "Products", "description": "Product catalog and stock adjustments"},
    {"name": "Categories", "description": "Product category management"},
    {"name": "Reports", "description": "Dashboard, inventory and movement reports"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    # Startup: verify database connection
    async with engine.connect() as conn:
        await conn.run_sync(lambda _: None)
    logger.info("%s %s started (%s)", settings.app_name, settings.version, settings.environment)
    yield
    # Shutdown: dispose all connections
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Inventory management REST API",
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=_OPENAPI_TAGS,
)

register_exception_handlers(app)
app.state.limiter = limiter

# ---------------------------------------------------------------------------
# Middleware (Starlette LIFO: last add_middleware call runs outermost)
# ---------------------------------------------------------------------------

# TimeoutMiddleware runs innermost so the timeout covers only the handler.
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# AccessLogMiddleware reads REQUEST_ID_CTX written by RequestIdMiddleware, so it
# must run inside it (closer to the application).
app.add_middleware(AccessLogMiddleware)

# RequestIdMiddleware runs outermost so every other layer sees the ID.
app.add_middleware(RequestIdMiddleware)

app.include_router(api_router)
