"""Health endpoints: a DB-free liveness probe and a DB-backed readiness probe."""

import logging
import time
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from inventrack.config import settings
from inventrack.database import AsyncSessionLocal
from inventrack.schemas.health import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

_STARTED = time.monotonic()


@router.get("", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report that the process is up.

    Never touches the database, so a database outage does not get the
    container restarted by a liveness probe.
    """
    return HealthResponse(
        status="ok",
        version=settings.version,
        environment=settings.environment,
        uptime_seconds=int(time.monotonic() - _STARTED),
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse, "description": "Database unreachable"}},
)
async def ready() -> ReadinessResponse | JSONResponse:
    """Execute ``SELECT 1``; 200 when the database answers, 503 otherwise."""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Readiness check failed: %s", type(exc).__name__)
        body = ReadinessResponse(status="degraded", database="disconnected")
        return JSONResponse(status_code=503, content=body.model_dump())
    return ReadinessResponse(status="ok", database="connected")
