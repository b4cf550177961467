"""Global exception handlers that return consistent JSON error envelopes.

Every failure is rendered as::

    {"success": false, "message": "...", "error": "<CODE>", "errors": [...], "stack": "..."}

``errors`` is present only for field-level validation failures; ``stack`` only
outside production. Use :func:`register_exception_handlers` to wire them up.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DataError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException

from inventrack.config import settings
from inventrack.errors import (
    AppError,
    DatabaseUnavailableError,
    ValidationError,
    from_integrity_error,
)
from inventrack.middleware.rate_limit import rate_limit_exceeded_handler
from inventrack.schemas.common import ErrorItem, ErrorResponse

logger = logging.getLogger(__name__)

# Map HTTP status codes to stable error code strings used in the response envelope.
_STATUS_TO_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMITED",
    500: "INTERNAL_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _code_for_status(status_code: int) -> str:
    """Return the error code string for *status_code*, falling back to ``HTTP_{code}``."""
    return _STATUS_TO_CODE.get(status_code, f"HTTP_{status_code}")


def error_response(
    status_code: int,
    message: str,
    code: str,
    *,
    errors: list[ErrorItem] | None = None,
    stack: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, error=code, errors=errors, stack=stack)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
        headers=headers,
    )


def _stack(exc: BaseException) -> str | None:
    if settings.is_production:
        return None
    return "".join(traceback.format_exception(exc))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an :class:`AppError` with its own status and code.

    401 responses carry ``WWW-Authenticate: Bearer``.
    """
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    errors = [ErrorItem(**item) for item in exc.errors] if exc.errors else None
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.code, errors=errors, headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert Starlette ``HTTPException`` (unknown route, wrong method) to the envelope.

    Response headers on the exception are forwarded to the client.
    """
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    headers = dict(exc.headers) if exc.headers else None
    return error_response(
        exc.status_code,
        detail,
        _code_for_status(exc.status_code),
        headers=headers,
    )


def _param(loc: tuple[Any, ...]) -> str:
    # ``loc`` is a tuple like ``("body", "email")`` or ``("query", "page")``.
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    if parts:
        return ".".join(parts)
    return str(loc[-1]) if loc else "unknown"


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert ``RequestValidationError`` to a 400 envelope.

    Each failure becomes ``{"msg", "param", "value"}`` where ``param`` is the dotted
    field path with the ``body``/``query``/``path`` prefix stripped and ``value``
    is the rejected input.
    """
    errors = [
        ErrorItem(
            msg=error["msg"],
            param=_param(tuple(error.get("loc", ()))),
            value=jsonable_encoder(error.get("input")),
        )
        for error in exc.errors()
    ]
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Invalid input data",
        "VALIDATION_ERROR",
        errors=errors,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Safety net for constraint violations that escape the services.

    Unique violations map to 409, foreign-key and check violations to 400.
    """
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return await app_error_handler(request, from_integrity_error(exc))


async def data_error_handler(request: Request, exc: DataError) -> JSONResponse:
    """Return 400 for values the database rejects, such as an out-of-range integer."""
    logger.warning("Data error on %s %s: %s", request.method, request.url.path, exc.orig)
    return await app_error_handler(request, ValidationError("Invalid value for a database field"))


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 503 when the database cannot be reached or the pool is exhausted."""
    logger.error(
        "Database unavailable on %s %s: %s", request.method, request.url.path, type(exc).__name__
    )
    return await app_error_handler(request, DatabaseUnavailableError())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for any exception not matched by a more specific handler.

    Logs the full traceback at ERROR level and returns a generic message. The
    traceback is echoed in ``stack`` only outside production.
    """
    logger.error(
        "Unhandled %s on %s %s\n%s",
        type(exc).__name__,
        request.method,
        request.url.path,
        "".join(traceback.format_exception(exc)),
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An internal server error occurred",
        "INTERNAL_ERROR",
        stack=_stack(exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DataError, data_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(PoolTimeoutError, database_unavailable_handler)
    app.add_exception_handler(ConnectionError, database_unavailable_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
