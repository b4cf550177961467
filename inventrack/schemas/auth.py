import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


def _check_username(v: str) -> str:
    v = v.strip()
    if not 3 <= len(v) <= 50:
        raise ValueError("Username must be between 3 and 50 characters")
    if not _USERNAME_RE.match(v):
        raise ValueError("Username may only contain letters, numbers and underscores")
    return v


class RegisterRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "email": "alice@example.com",
                "password": "secret1",
            }
        }
    )

    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def username_format(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class ProfileUpdateRequest(BaseModel):
    username: str
    email: EmailStr

    @field_validator("username")
    @classmethod
    def username_format(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expires


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProfileResponse(UserResponse):
    products_created: int = 0


class AuthData(BaseModel):
    user: UserResponse
    tokens: TokenPairResponse


class UserData(BaseModel):
    user: UserResponse


class ProfileData(BaseModel):
    user: ProfileResponse
