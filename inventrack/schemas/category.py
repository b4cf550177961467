"""Pydantic schemas for Category resources."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inventrack.schemas.common import Pagination

_EXAMPLE_CATEGORY_ID = "7f3e1b2a-8c4d-4e5f-9a6b-1c2d3e4f5a6b"
_EXAMPLE_TS = "2026-01-15T10:30:00Z"


class CategoryWrite(BaseModel):
    """Body of both POST and PUT: updates always resend the full record."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Electronics",
                "description": "Consumer electronics and accessories",
            }
        }
    )

    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


CategoryCreate = CategoryWrite
CategoryUpdate = CategoryWrite


class CategoryResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": _EXAMPLE_CATEGORY_ID,
                "name": "Electronics",
                "description": "Consumer electronics and accessories",
                "is_active": True,
                "created_at": _EXAMPLE_TS,
                "updated_at": _EXAMPLE_TS,
            }
        },
    )

    id: uuid.UUID
    name: str
    description: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    # Aggregates over active products; only filled when stats are requested.
    product_count: int | None = None
    total_quantity: int | None = None
    total_value: Decimal | None = None


class CategorySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class CategoryData(BaseModel):
    category: CategoryResponse


class CategoryListData(BaseModel):
    categories: list[CategoryResponse]
    pagination: Pagination
