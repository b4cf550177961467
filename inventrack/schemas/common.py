from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "current_page": 1,
                "total_pages": 3,
                "total_items": 45,
                "items_per_page": 20,
                "has_next": True,
                "has_previous": False,
            }
        }
    )

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_previous: bool


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every endpoint."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"success": True, "message": "Product deleted successfully"}}
    )

    success: bool = True
    message: str


class ErrorItem(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "msg": "value is not a valid email address",
                "param": "email",
                "value": "not-an-email",
            }
        }
    )

    msg: str
    param: str
    value: Any = None


class ErrorResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "message": "Access token required",
                "error": "UNAUTHORIZED",
            }
        }
    )

    success: bool = False
    message: str
    error: str
    errors: list[ErrorItem] | None = None
    stack: str | None = None
