"""Pydantic schemas for admin user management."""

from pydantic import BaseModel

from inventrack.enums import Role
from inventrack.schemas.auth import UserResponse
from inventrack.schemas.common import Pagination


class RoleUpdateRequest(BaseModel):
    role: Role


class StatusUpdateRequest(BaseModel):
    is_active: bool


class UserListData(BaseModel):
    users: list[UserResponse]
    pagination: Pagination
