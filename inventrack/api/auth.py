"""Authentication endpoints: register, login, refresh, profile and token checks."""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.dependencies import AuthContext, get_current_user, get_db
from inventrack.middleware.rate_limit import (
    LOGIN_LIMIT,
    PROFILE_UPDATE_LIMIT,
    REFRESH_LIMIT,
    REGISTER_LIMIT,
    get_user_key,
    limiter,
)
from inventrack.models import User
from inventrack.schemas.auth import (
    AccessTokenResponse,
    AuthData,
    LoginRequest,
    ProfileData,
    ProfileUpdateRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
    UserData,
    UserResponse,
)
from inventrack.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from inventrack.services import users as user_service
from inventrack.services.auth import access_token_ttl_seconds, issue_token_pair, refresh_access_token

router = APIRouter(prefix="/auth", tags=["Auth"])

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Not authenticated"}}


def _auth_data(user: User) -> AuthData:
    pair = issue_token_pair(user.id, user.email, user.role)
    return AuthData(
        user=UserResponse.model_validate(user),
        tokens=TokenPairResponse(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_in=access_token_ttl_seconds(),
        ),
    )


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Request validation failed"},
        409: {"model": ErrorResponse, "description": "Username or email already registered"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> ApiResponse[AuthData]:
    """Register a new account with role ``user`` and return a token pair.

    Rate limited: 5 requests per minute per IP address.
    """
    user = await user_service.register_user(db, body)
    return ApiResponse(message="User registered successfully", data=_auth_data(user))


@router.post(
    "/login",
    response_model=ApiResponse[AuthData],
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials or inactive account"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> ApiResponse[AuthData]:
    """Authenticate with email and password and return a fresh token pair.

    Rate limited: 10 requests per minute per IP address.
    """
    user = await user_service.authenticate_user(db, body.email, body.password)
    return ApiResponse(message="Login successful", data=_auth_data(user))


@router.post(
    "/refresh",
    response_model=ApiResponse[AccessTokenResponse],
    responses={
        401: {"model": ErrorResponse, "description": "Invalid or expired refresh token"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
)
@limiter.limit(REFRESH_LIMIT)
async def refresh(
    request: Request,
    response: Response,
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> ApiResponse[AccessTokenResponse]:
    """Exchange a refresh token for a new access token.

    The refresh token itself is not rotated; it stays valid until it expires.
    Rate limited: 30 requests per minute per IP address.
    """
    access_token, _user = await refresh_access_token(db, body.refresh_token)
    return ApiResponse(
        message="Token refreshed successfully",
        data=AccessTokenResponse(access_token=access_token, expires_in=access_token_ttl_seconds()),
    )


@router.get("/profile", response_model=ApiResponse[ProfileData], responses=_UNAUTHORIZED)
async def get_profile(
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> ApiResponse[ProfileData]:
    """Return the caller's profile including how many active products they created."""
    profile = await user_service.get_profile(db, ctx.user)
    return ApiResponse(data=ProfileData(user=profile))


@router.put(
    "/profile",
    response_model=ApiResponse[UserData],
    responses={
        **_UNAUTHORIZED,
        409: {"model": ErrorResponse, "description": "Username or email already in use"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
)
@limiter.limit(PROFILE_UPDATE_LIMIT, key_func=get_user_key)
async def update_profile(
    request: Request,
    response: Response,
    body: ProfileUpdateRequest,
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> ApiResponse[UserData]:
    """Change the caller's username and email.  Role and status are not editable here."""
    user = await user_service.update_profile(db, ctx.user, body)
    return ApiResponse(
        message="Profile updated successfully",
        data=UserData(user=UserResponse.model_validate(user)),
    )


@router.get("/verify-token", response_model=ApiResponse[UserData], responses=_UNAUTHORIZED)
async def verify_token(
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[UserData]:
    """Return the caller when the presented access token is still valid."""
    return ApiResponse(
        message="Token is valid",
        data=UserData(user=UserResponse.model_validate(ctx.user)),
    )


@router.post("/logout", response_model=MessageResponse, responses=_UNAUTHORIZED)
async def logout(
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    """Acknowledge a logout.

    Tokens are stateless and are not revoked server-side; the client is
    expected to discard both of them.
    """
    return MessageResponse(message="Logged out successfully")
