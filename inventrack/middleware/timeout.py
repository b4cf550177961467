"""Per-request timeout middleware.

A request that runs longer than ``settings.request_timeout_seconds`` is
cancelled and answered with 503 instead of holding the connection open.
"""

import asyncio
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from inventrack.middleware.error_handler import error_response

logger = logging.getLogger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except TimeoutError:
            logger.error(
                "Request timed out after %ss: %s %s",
                self.timeout_seconds,
                request.method,
                request.url.path,
            )
            return error_response(503, "Request timed out", "SERVICE_UNAVAILABLE")
