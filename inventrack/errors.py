"""Application error taxonomy.

Services raise these; :mod:`inventrack.middleware.error_handler` turns them into
the standard JSON envelope with the matching HTTP status.
"""

from typing import Any


class AppError(Exception):
    """Base class for every error that maps to a well-defined HTTP response."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "An internal server error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input data"


class AuthenticationError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class TokenExpiredError(AuthenticationError):
    code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class TokenInvalidError(AuthenticationError):
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class AuthorizationError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You do not have permission to access this resource"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "A resource with the given data already exists"


class DatabaseUnavailableError(AppError):
    status_code = 503
    code = "SERVICE_UNAVAILABLE"
    default_message = "Database connection error"


class InternalError(AppError):
    pass


# PostgreSQL SQLSTATE codes for the integrity violations we translate.
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"
_CHECK_VIOLATION = "23514"
_NOT_NULL_VIOLATION = "23502"


def _sqlstate(exc: Exception) -> str | None:
    orig = getattr(exc, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "pgcode", None) or getattr(candidate, "sqlstate", None)
        if isinstance(code, str):
            return code
    return None


def from_integrity_error(
    exc: Exception,
    *,
    conflict_message: str | None = None,
    invalid_message: str | None = None,
) -> AppError:
    """Translate a SQLAlchemy ``IntegrityError`` into an :class:`AppError`.

    Unique violations become :class:`ConflictError`; foreign-key, check and
    not-null violations become :class:`ValidationError`. Driver messages are
    never copied into the result.
    """
    code = _sqlstate(exc)
    if code is None:
        text = str(getattr(exc, "orig", exc)).lower()
        if "unique" in text or "duplicate" in text:
            code = _UNIQUE_VIOLATION
    if code == _UNIQUE_VIOLATION:
        return ConflictError(conflict_message)
    if code in (_FOREIGN_KEY_VIOLATION, _CHECK_VIOLATION, _NOT_NULL_VIOLATION):
        return ValidationError(invalid_message or "Invalid reference or value")
    return ValidationError(invalid_message or "Database integrity constraint violation")
