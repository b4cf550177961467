"""slowapi limiter shared by the auth routes, plus its 429 handler.

The auth endpoints that accept credentials are keyed by client IP. Profile
updates are keyed by the caller's user id, taken from the bearer token.

Rate-limited endpoints must accept ``request: Request`` and ``response: Response``
so slowapi can inject the ``X-RateLimit-*`` headers.
"""

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import Response

from inventrack.config import settings
from inventrack.schemas.common import ErrorResponse

__all__ = [
    "LOGIN_LIMIT",
    "PROFILE_UPDATE_LIMIT",
    "REFRESH_LIMIT",
    "REGISTER_LIMIT",
    "get_remote_address",
    "get_user_key",
    "limiter",
    "rate_limit_exceeded_handler",
]

REGISTER_LIMIT = "5/minute"
LOGIN_LIMIT = "10/minute"
REFRESH_LIMIT = "30/minute"
PROFILE_UPDATE_LIMIT = "20/minute"


def _access_token_subject(token: str) -> str | None:
    # Expiry is ignored: an expired token still identifies who is calling,
    # and get_current_user rejects it afterwards.
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": False},
        )
    except JWTError:
        return None
    if claims.get("type") != "access":
        return None
    sub = claims.get("sub")
    return sub if isinstance(sub, str) and sub else None


def get_user_key(request: Request) -> str:
    """``"user:<uuid>"`` for a signed access token, otherwise the client IP."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme == "Bearer" and token:
        user_id = _access_token_subject(token)
        if user_id is not None:
            return f"user:{user_id}"
    return get_remote_address(request)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 in the standard error envelope, carrying the limiter's headers."""
    body = ErrorResponse(
        message="Too many requests, please try again later.",
        error="RATE_LIMITED",
    )
    response: Response = JSONResponse(
        status_code=429,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
    )
    # slowapi records the tripped limit on request.state before raising.
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    app_limiter: Limiter | None = getattr(request.app.state, "limiter", None)
    if view_rate_limit is not None and app_limiter is not None:
        response = app_limiter._inject_headers(response, view_rate_limit)
    return response


# In-memory storage: limits are per process and reset on restart.
limiter: Limiter = Limiter(key_func=get_remote_address, headers_enabled=True)
