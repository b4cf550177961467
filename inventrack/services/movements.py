"""Inventory movement recorder and movement-history queries."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.enums import MovementType
from inventrack.errors import ValidationError
from inventrack.models import Category, InventoryMovement, Product, User
from inventrack.schemas.common import Pagination
from inventrack.schemas.movement import MovementHistoryItem
from inventrack.utils.pagination import paginate


async def record_movement(
    db: AsyncSession,
    *,
    product_id: uuid.UUID,
    user_id: uuid.UUID,
    movement_type: MovementType,
    quantity_before: int,
    quantity_after: int,
    reason: str | None = None,
    notes: str | None = None,
) -> InventoryMovement:
    """Append one movement row inside the caller's open transaction.

    The row is flushed so its id is available, but never committed here: the
    caller commits it together with the product mutation it documents.
    """
    movement = InventoryMovement(
        product_id=product_id,
        user_id=user_id,
        movement_type=movement_type.value,
        quantity_before=quantity_before,
        quantity_after=quantity_after,
        quantity_changed=quantity_after - quantity_before,
        reason=reason,
        notes=notes,
    )
    db.add(movement)
    await db.flush()
    return movement


def movement_history_query() -> Select[Any]:
    """Movements joined with product, category and user names, newest first."""
    return (
        select(
            InventoryMovement,
            Product.name.label("product_name"),
            Category.name.label("category_name"),
            User.username.label("username"),
        )
        .join(Product, InventoryMovement.product_id == Product.id)
        .outerjoin(Category, Product.category_id == Category.id)
        .join(User, InventoryMovement.user_id == User.id)
        .order_by(InventoryMovement.created_at.desc(), InventoryMovement.id)
    )


def to_history_item(row: Any) -> MovementHistoryItem:
    movement: InventoryMovement = row[0]
    return MovementHistoryItem(
        id=movement.id,
        product_id=movement.product_id,
        user_id=movement.user_id,
        movement_type=movement.movement_type,
        quantity_before=movement.quantity_before,
        quantity_after=movement.quantity_after,
        quantity_changed=movement.quantity_changed,
        reason=movement.reason,
        notes=movement.notes,
        created_at=movement.created_at,
        product_name=row.product_name,
        category_name=row.category_name,
        username=row.username,
    )


async def list_movements(
    db: AsyncSession,
    *,
    product_id: uuid.UUID | None = None,
    movement_type: MovementType | None = None,
    user_id: uuid.UUID | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[MovementHistoryItem], Pagination]:
    """Return one page of movement history matching the given filters."""
    if start_date and end_date and start_date > end_date:
        raise ValidationError(
            "start_date must not be after end_date",
            errors=[
                {
                    "msg": "start_date must not be after end_date",
                    "param": "start_date",
                    "value": start_date.isoformat(),
                }
            ],
        )

    query = movement_history_query()
    if product_id is not None:
        query = query.where(InventoryMovement.product_id == product_id)
    if movement_type is not None:
        query = query.where(InventoryMovement.movement_type == movement_type.value)
    if user_id is not None:
        query = query.where(InventoryMovement.user_id == user_id)
    if start_date is not None:
        query = query.where(InventoryMovement.created_at >= start_date)
    if end_date is not None:
        query = query.where(InventoryMovement.created_at <= end_date)

    rows, pagination = await paginate(db, query, page, limit, scalars=False)
    return [to_history_item(row) for row in rows], pagination
