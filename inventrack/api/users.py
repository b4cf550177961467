"""Admin user-management endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.dependencies import AuthContext, get_db, require_admin
from inventrack.enums import Role
from inventrack.schemas.auth import UserData, UserResponse
from inventrack.schemas.common import ApiResponse, ErrorResponse
from inventrack.schemas.user import RoleUpdateRequest, StatusUpdateRequest, UserListData
from inventrack.services import users as user_service

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin access required"},
    },
)


@router.get("", response_model=ApiResponse[UserListData])
async def list_users(
    search: str | None = Query(None, max_length=100),  # noqa: B008
    role: Role | None = Query(None),  # noqa: B008
    is_active: bool | None = Query(None),  # noqa: B008
    page: int = Query(1, ge=1),  # noqa: B008
    limit: int = Query(20, ge=1, le=100),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(require_admin),  # noqa: B008
) -> ApiResponse[UserListData]:
    """Return users (active and deactivated), newest first.  Admin only."""
    users, pagination = await user_service.list_users(
        db, search=search, role=role, is_active=is_active, page=page, limit=limit
    )
    return ApiResponse(
        data=UserListData(
            users=[UserResponse.model_validate(u) for u in users],
            pagination=pagination,
        )
    )


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserData],
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(require_admin),  # noqa: B008
) -> ApiResponse[UserData]:
    user = await user_service.get_user(db, user_id)
    return ApiResponse(data=UserData(user=UserResponse.model_validate(user)))


@router.put(
    "/{user_id}/role",
    response_model=ApiResponse[UserData],
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def update_role(
    user_id: uuid.UUID,
    body: RoleUpdateRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(require_admin),  # noqa: B008
) -> ApiResponse[UserData]:
    """Change another user's role.  An admin cannot change their own role (403)."""
    user = await user_service.change_role(db, user_id, body.role, ctx)
    return ApiResponse(
        message="User role updated successfully",
        data=UserData(user=UserResponse.model_validate(user)),
    )


@router.put(
    "/{user_id}/status",
    response_model=ApiResponse[UserData],
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def update_status(
    user_id: uuid.UUID,
    body: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(require_admin),  # noqa: B008
) -> ApiResponse[UserData]:
    """Activate or deactivate another user.  Users are never hard-deleted."""
    user = await user_service.set_active(db, user_id, body.is_active, ctx)
    return ApiResponse(
        message="User activated successfully" if body.is_active else "User deactivated successfully",
        data=UserData(user=UserResponse.model_validate(user)),
    )
