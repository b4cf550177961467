"""Request ID middleware.

Every response carries an ``X-Request-Id`` header. A well-formed ID supplied by
the client (or a proxy in front of the API) is reused; otherwise a UUID4 is
minted. The ID is also stored in a ``ContextVar`` so the access log and any
other code can read it without touching the request object.

Add this middleware *last* via ``app.add_middleware`` so it runs outermost.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-Id"

# Defaults to "" so consumers never receive ``None``.
REQUEST_ID_CTX: ContextVar[str] = ContextVar("request_id", default="")

_VALID_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def _incoming_id(request: Request) -> str | None:
    candidate = request.headers.get(REQUEST_ID_HEADER)
    if candidate and _VALID_ID.match(candidate):
        return candidate
    return None


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _incoming_id(request) or str(uuid.uuid4())
        token = REQUEST_ID_CTX.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            REQUEST_ID_CTX.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
