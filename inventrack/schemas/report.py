"""Pydantic schemas for the read-only reporting endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict

from inventrack.enums import StockStatus
from inventrack.schemas.movement import MovementHistoryItem


class DashboardStats(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_products": 120,
                "total_categories": 8,
                "total_users": 5,
                "total_inventory_value": "48210.50",
                "low_stock_count": 14,
            }
        }
    )

    total_products: int
    total_categories: int
    total_users: int
    total_inventory_value: Decimal
    low_stock_count: int


class LowStockItem(BaseModel):
    id: uuid.UUID
    name: str
    quantity: int
    min_stock: int
    category_name: str | None
    stock_ratio: float | None


class ValuableItem(BaseModel):
    id: uuid.UUID
    name: str
    price: Decimal
    quantity: int
    total_value: Decimal
    category_name: str | None


class CategoryDistribution(BaseModel):
    id: uuid.UUID
    name: str
    product_count: int
    total_quantity: int
    total_value: Decimal


class DashboardData(BaseModel):
    stats: DashboardStats
    low_stock_products: list[LowStockItem]
    valuable_products: list[ValuableItem]
    category_distribution: list[CategoryDistribution]
    recent_movements: list[MovementHistoryItem]


class InventoryItem(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    barcode: str | None
    price: Decimal
    quantity: int
    min_stock: int
    category_id: uuid.UUID
    category_name: str | None
    created_by_username: str | None
    stock_status: StockStatus
    total_value: Decimal
    created_at: datetime
    updated_at: datetime


class InventorySummary(BaseModel):
    total_products: int
    total_value: Decimal
    total_quantity: int
    low_stock_count: int
    medium_stock_count: int
    high_stock_count: int


class InventoryReport(BaseModel):
    products: list[InventoryItem]
    summary: InventorySummary
    filters: dict[str, Any]
    generated_at: datetime


class QuickStats(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_products": 120,
                "total_quantity": 5230,
                "total_inventory_value": "48210.50",
                "average_price": "37.42",
                "low_stock_count": 14,
            }
        }
    )

    total_products: int
    total_quantity: int
    total_inventory_value: Decimal
    average_price: Decimal
    low_stock_count: int
