"""Pydantic schemas for Product resources and stock adjustments."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from inventrack.enums import MovementType, StockStatus
from inventrack.schemas.category import CategorySummary
from inventrack.schemas.common import Pagination
from inventrack.schemas.movement import MovementResponse
from inventrack.utils.stock import classify_stock

_EXAMPLE_PRODUCT_ID = "2a3b4c5d-6e7f-8a9b-0c1d-2e3f4a5b6c7d"
_EXAMPLE_CATEGORY_ID = "7f3e1b2a-8c4d-4e5f-9a6b-1c2d3e4f5a6b"
_EXAMPLE_USER_ID = "12345678-1234-1234-1234-123456789012"
_EXAMPLE_TS = "2026-01-10T08:00:00Z"

# quantity and min_stock are INTEGER columns.
MAX_QUANTITY = 2_147_483_647


class ProductWrite(BaseModel):
    """Body of both POST and PUT.

    Updates are full-record replacements: every field must be resent.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Widget",
                "description": "General purpose widget",
                "category_id": _EXAMPLE_CATEGORY_ID,
                "price": "9.99",
                "quantity": 5,
                "min_stock": 10,
                "barcode": "7501234567890",
            }
        }
    )

    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None
    category_id: uuid.UUID
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., ge=0, le=MAX_QUANTITY)
    min_stock: int = Field(10, ge=0, le=MAX_QUANTITY)
    barcode: str | None = Field(None, max_length=50)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("barcode", mode="before")
    @classmethod
    def blank_barcode_is_none(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class ProductCreate(ProductWrite):
    pass


class ProductUpdate(ProductWrite):
    # Recorded on the UPDATE movement when the quantity changes.
    reason: str | None = Field(None, max_length=255)
    notes: str | None = None


class CreatorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str


class ProductResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": _EXAMPLE_PRODUCT_ID,
                "name": "Widget",
                "description": "General purpose widget",
                "category_id": _EXAMPLE_CATEGORY_ID,
                "price": "9.99",
                "quantity": 5,
                "min_stock": 10,
                "barcode": "7501234567890",
                "is_active": True,
                "created_by": _EXAMPLE_USER_ID,
                "created_at": _EXAMPLE_TS,
                "updated_at": _EXAMPLE_TS,
                "category": {"id": _EXAMPLE_CATEGORY_ID, "name": "Hardware"},
                "creator": {"id": _EXAMPLE_USER_ID, "username": "alice"},
                "stock_status": "LOW",
                "total_value": "49.95",
            }
        },
    )

    id: uuid.UUID
    name: str
    description: str | None
    category_id: uuid.UUID
    price: Decimal
    quantity: int
    min_stock: int
    barcode: str | None
    is_active: bool
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
    category: CategorySummary
    creator: CreatorSummary

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.quantity, self.min_stock)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_value(self) -> Decimal:
        return self.price * self.quantity


class StockAdjustmentRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "movement_type": "STOCK_IN",
                "quantity": 25,
                "reason": "Supplier delivery",
                "notes": "PO-2026-0113",
            }
        }
    )

    movement_type: Literal[MovementType.STOCK_IN, MovementType.STOCK_OUT]
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY)
    reason: str | None = Field(None, max_length=255)
    notes: str | None = None


class ProductData(BaseModel):
    product: ProductResponse


class ProductListData(BaseModel):
    products: list[ProductResponse]
    pagination: Pagination
    filters: dict[str, Any]


class StockAdjustmentData(BaseModel):
    product: ProductResponse
    movement: MovementResponse
