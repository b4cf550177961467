"""User service: registration, login, profile and admin user management."""

import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.dependencies import AuthContext
from inventrack.enums import Role
from inventrack.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    from_integrity_error,
)
from inventrack.models import Product, User
from inventrack.schemas.auth import ProfileResponse, ProfileUpdateRequest, RegisterRequest
from inventrack.schemas.common import Pagination
from inventrack.services.auth import hash_password, verify_password
from inventrack.utils.pagination import paginate
from inventrack.utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid email or password"
_IDENTITY_TAKEN = "Username or email already in use"


async def _ensure_identity_free(
    db: AsyncSession,
    username: str,
    email: str,
    exclude_id: uuid.UUID | None = None,
) -> None:
    query = select(User.username, User.email).where(
        or_(func.lower(User.username) == username.lower(), User.email == email)
    )
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    clash = (await db.execute(query)).first()
    if clash is None:
        return
    if clash.email == email:
        raise ConflictError("Email already registered")
    raise ConflictError("Username already taken")


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise from_integrity_error(exc, conflict_message=_IDENTITY_TAKEN) from None


async def register_user(db: AsyncSession, body: RegisterRequest) -> User:
    """Create a user with role ``user``.

    Raises:
        ConflictError: the username or email is already registered.
    """
    await _ensure_identity_free(db, body.username, body.email)

    user = User(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        role=Role.user.value,
    )
    db.add(user)
    await _commit(db)
    await db.refresh(user)

    logger.info("User registered: %s (%s)", user.username, user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """Return the user matching *email* and *password*.

    The password is checked before the active flag so an inactive account is
    only revealed to someone who knows its password.
    """
    result = await db.execute(select(User).where(User.email == email.lower()))
    user: User | None = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise AuthenticationError(_INVALID_CREDENTIALS)
    if not user.is_active:
        logger.warning("Login attempt on inactive account %s", user.id)
        raise AuthenticationError("Account is inactive")
    return user


async def get_profile(db: AsyncSession, user: User) -> ProfileResponse:
    products_created: int = (
        await db.execute(
            select(func.count())
            .select_from(Product)
            .where(Product.created_by == user.id, Product.is_active.is_(True))
        )
    ).scalar_one()
    profile = ProfileResponse.model_validate(user)
    profile.products_created = products_created
    return profile


async def update_profile(db: AsyncSession, user: User, body: ProfileUpdateRequest) -> User:
    await _ensure_identity_free(db, body.username, body.email, exclude_id=user.id)

    user.username = body.username
    user.email = body.email
    await _commit(db)
    await db.refresh(user)

    logger.info("User %s updated their profile", user.id)
    return user


async def list_users(
    db: AsyncSession,
    *,
    search: str | None = None,
    role: Role | None = None,
    is_active: bool | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[User], Pagination]:
    """Return one page of users, newest first.  Deactivated users are included."""
    query = select(User)
    if search:
        pattern = contains_pattern(search)
        query = query.where(
            or_(
                User.username.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if role is not None:
        query = query.where(User.role == role.value)
    if is_active is not None:
        query = query.where(User.is_active.is_(is_active))
    query = query.order_by(User.created_at.desc(), User.id)
    return await paginate(db, query, page, limit)


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user: User | None = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _ensure_not_self(user_id: uuid.UUID, ctx: AuthContext, action: str) -> None:
    if user_id == ctx.user_id:
        logger.warning("User %s tried to %s their own account", ctx.user_id, action)
        raise AuthorizationError(f"You cannot {action} your own account")


async def change_role(db: AsyncSession, user_id: uuid.UUID, role: Role, ctx: AuthContext) -> User:
    """Set another user's role.  Admins cannot change their own role."""
    _ensure_not_self(user_id, ctx, "change the role of")
    user = await get_user(db, user_id)

    user.role = role.value
    await db.commit()
    await db.refresh(user)

    logger.info("User %s role set to %s by %s", user_id, role.value, ctx.user_id)
    return user


async def set_active(
    db: AsyncSession,
    user_id: uuid.UUID,
    is_active: bool,
    ctx: AuthContext,
) -> User:
    """Activate or deactivate another user.  Accounts are never hard-deleted."""
    _ensure_not_self(user_id, ctx, "change the status of")
    user = await get_user(db, user_id)

    user.is_active = is_active
    await db.commit()
    await db.refresh(user)

    logger.info(
        "User %s %s by %s",
        user_id,
        "activated" if is_active else "deactivated",
        ctx.user_id,
    )
    return user
