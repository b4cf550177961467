"""Pydantic schemas for inventory movements."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from inventrack.enums import MovementType
from inventrack.schemas.common import Pagination


class MovementResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "9b8c7d6e-5f4a-3b2c-1d0e-f9a8b7c6d5e4",
                "product_id": "2a3b4c5d-6e7f-8a9b-0c1d-2e3f4a5b6c7d",
                "user_id": "12345678-1234-1234-1234-123456789012",
                "movement_type": "CREATE",
                "quantity_before": 0,
                "quantity_after": 5,
                "quantity_changed": 5,
                "reason": "Product created",
                "notes": None,
                "created_at": "2026-01-10T08:00:00Z",
            }
        },
    )

    id: uuid.UUID
    product_id: uuid.UUID
    user_id: uuid.UUID
    movement_type: MovementType
    quantity_before: int
    quantity_after: int
    quantity_changed: int
    reason: str | None
    notes: str | None
    created_at: datetime


class MovementHistoryItem(MovementResponse):
    """A movement joined with the names a history view needs."""

    product_name: str
    category_name: str | None = None
    username: str


class MovementListData(BaseModel):
    movements: list[MovementHistoryItem]
    pagination: Pagination
