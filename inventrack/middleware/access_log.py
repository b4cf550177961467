"""Structured JSON access logging middleware.

Emits one log record per request containing ``method``, ``path``, ``status``,
``duration_ms``, ``request_id`` and ``client``. Server errors are logged at
``WARNING`` so they stand out from normal traffic.
"""

import json
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from inventrack.middleware.request_id import REQUEST_ID_CTX

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            json.dumps(
                {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "request_id": REQUEST_ID_CTX.get(),
                    "client": request.client.host if request.client else None,
                }
            ),
        )
        return response
