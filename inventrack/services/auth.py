"""Token service: password hashing plus issuing and verifying JWT access/refresh tokens."""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any, NamedTuple

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.config import settings
from inventrack.errors import AuthenticationError, TokenExpiredError, TokenInvalidError
from inventrack.models import User

logger = logging.getLogger(__name__)

_pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

ACCESS = "access"
REFRESH = "refresh"


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


# ---------------------------------------------------------------------------
# Password
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """Return a bcrypt hash of *password* using the configured cost rounds."""
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if *password* matches *password_hash*."""
    return _pwd_context.verify(password, password_hash)


# ---------------------------------------------------------------------------
# JWT tokens
# ---------------------------------------------------------------------------


def _encode(
    user_id: uuid.UUID | str,
    email: str,
    role: str,
    token_type: str,
    expires_in: timedelta,
    secret: str,
) -> str:
    # jti keeps tokens issued within the same second distinct.
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "type": token_type,
        "iat": now,
        "exp": now + expires_in,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def access_token_ttl_seconds() -> int:
    return settings.access_token_expire_minutes * 60


def create_access_token(user_id: uuid.UUID | str, email: str, role: str) -> str:
    """Return a signed access token valid for *access_token_expire_minutes*."""
    return _encode(
        user_id,
        email,
        role,
        ACCESS,
        timedelta(minutes=settings.access_token_expire_minutes),
        settings.jwt_secret_key,
    )


def create_refresh_token(user_id: uuid.UUID | str, email: str, role: str) -> str:
    """Return a signed refresh token valid for *refresh_token_expire_days*.

    Refresh tokens are signed with their own secret and carry ``type="refresh"``,
    so one can never be presented where the other is expected.
    """
    return _encode(
        user_id,
        email,
        role,
        REFRESH,
        timedelta(days=settings.refresh_token_expire_days),
        settings.jwt_refresh_secret_key,
    )


def issue_token_pair(user_id: uuid.UUID | str, email: str, role: str) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user_id, email, role),
        refresh_token=create_refresh_token(user_id, email, role),
    )


def verify_token(token: str, secret: str, expected_type: str) -> dict[str, Any]:
    """Decode *token* with *secret* and return its claims.

    Raises:
        TokenExpiredError: the signature is valid but ``exp`` has passed.
        TokenInvalidError: bad signature, malformed token, wrong ``type`` claim,
            or a missing / non-UUID ``sub``.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise TokenExpiredError() from None
    except JWTError:
        raise TokenInvalidError() from None

    if claims.get("type") != expected_type:
        raise TokenInvalidError()

    raw_id = claims.get("sub")
    if not raw_id:
        raise TokenInvalidError()
    try:
        uuid.UUID(str(raw_id))
    except ValueError:
        raise TokenInvalidError() from None

    return claims


def decode_access_token(token: str) -> dict[str, Any]:
    return verify_token(token, settings.jwt_secret_key, ACCESS)


def decode_refresh_token(token: str) -> dict[str, Any]:
    return verify_token(token, settings.jwt_refresh_secret_key, REFRESH)


async def refresh_access_token(db: AsyncSession, refresh_token: str) -> tuple[str, User]:
    """Mint a new access token from *refresh_token*.

    The referenced user is re-read so a deactivated account cannot keep
    refreshing. Email and role in the new token come from the live row.
    """
    claims = decode_refresh_token(refresh_token)

    user: User | None = await db.get(User, uuid.UUID(claims["sub"]))
    if user is None or not user.is_active:
        logger.warning("Refresh rejected for user %s: not found or inactive", claims["sub"])
        raise AuthenticationError("User not found or inactive")

    return create_access_token(user.id, user.email, user.role), user
