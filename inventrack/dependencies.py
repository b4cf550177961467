"""FastAPI dependencies: DB session, the bearer-token gate, and role guards.

Routes compose these explicitly, e.g.::

    ctx: AuthContext = Depends(require_admin)

``require_admin`` depends on ``get_current_user``, which depends on ``get_db``,
so every guarded handler runs token check, then role check, then its body.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.database import get_db
from inventrack.enums import Role
from inventrack.errors import AuthenticationError, AuthorizationError
from inventrack.models import Product, User
from inventrack.services.auth import decode_access_token

__all__ = [
    "AuthContext",
    "get_db",
    "get_current_user",
    "require_role",
    "require_admin",
    "ensure_can_modify",
]

logger = logging.getLogger(__name__)

# Registered in the OpenAPI schema so Swagger UI shows the "Authorize" button.
_bearer_scheme = HTTPBearer(
    scheme_name="BearerAuth",
    description="JWT access token. Obtain one via **POST /api/v1/auth/login**, then paste the `access_token` value here.",
    auto_error=False,
)


@dataclass(frozen=True, slots=True)
class AuthContext:
    """The authenticated caller, handed to route handlers by value."""

    user_id: uuid.UUID
    email: str
    role: str
    user: User

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


async def get_current_user(
    bearer: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> AuthContext:
    """Resolve ``Authorization: Bearer <token>`` to a live, active user.

    Failure modes, all 401:

    * no bearer credentials: ``Access token required``
    * bad signature, malformed token or wrong token type: ``Invalid token``
    * expired token: ``Token expired``
    * unknown or deactivated user: ``User not found or inactive``

    ``email`` and ``role`` come from the database row, not the token, so a role
    change takes effect on the next request.
    """
    if bearer is None or not bearer.credentials:
        raise AuthenticationError("Access token required")

    claims = decode_access_token(bearer.credentials)

    user: User | None = await db.get(User, uuid.UUID(claims["sub"]))
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    return AuthContext(user_id=user.id, email=user.email, role=user.role, user=user)


def require_role(*roles: str) -> Callable[..., Awaitable[AuthContext]]:
    """Return a dependency that admits only callers holding one of *roles*."""
    allowed = frozenset(str(role) for role in roles)

    async def _guard(ctx: AuthContext = Depends(get_current_user)) -> AuthContext:  # noqa: B008
        if ctx.role not in allowed:
            logger.warning("Role %s denied; requires one of %s", ctx.role, sorted(allowed))
            raise AuthorizationError("Insufficient permissions")
        return ctx

    return _guard


require_admin = require_role(Role.admin)


def ensure_can_modify(product: Product, ctx: AuthContext) -> None:
    """Raise 403 unless *ctx* is an admin or created *product*."""
    if ctx.is_admin or product.created_by == ctx.user_id:
        return
    logger.warning("User %s denied modifying product %s", ctx.user_id, product.id)
    raise AuthorizationError("You can only modify products you created")
