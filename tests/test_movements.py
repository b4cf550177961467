"""Tests for the movement recorder and history mapping."""

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.dialects import postgresql

from inventrack.enums import MovementType
from inventrack.models import InventoryMovement
from inventrack.models.inventory_movement import _reject_mutation
from inventrack.services.movements import (
    movement_history_query,
    record_movement,
    to_history_item,
)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("movement_type", "before", "after", "changed"),
    [
        (MovementType.CREATE, 0, 5, 5),
        (MovementType.STOCK_OUT, 15, 0, -15),
        (MovementType.UPDATE, 8, 8, 0),
    ],
)
async def test_record_movement_computes_change(
    movement_type: MovementType, before: int, after: int, changed: int
) -> None:
    db_mock = AsyncMock()
    db_mock.add = MagicMock()

    movement = await record_movement(
        db_mock,
        product_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        movement_type=movement_type,
        quantity_before=before,
        quantity_after=after,
        reason="Recount",
    )

    assert isinstance(movement, InventoryMovement)
    assert movement.movement_type == movement_type.value
    assert movement.quantity_changed == changed
    assert movement.reason == "Recount"
    db_mock.add.assert_called_once_with(movement)
    db_mock.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_record_movement_leaves_commit_to_caller() -> None:
    db_mock = AsyncMock()
    db_mock.add = MagicMock()

    await record_movement(
        db_mock,
        product_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        movement_type=MovementType.STOCK_IN,
        quantity_before=1,
        quantity_after=2,
    )

    db_mock.commit.assert_not_called()


def test_history_query_newest_first() -> None:
    sql = str(movement_history_query().compile(dialect=postgresql.dialect()))

    assert "ORDER BY inventory_movements.created_at DESC" in sql
    assert "LEFT OUTER JOIN categories" in sql


def test_to_history_item_maps_labels() -> None:
    movement = SimpleNamespace(
        id=uuid.uuid4(),
        product_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        movement_type="STOCK_IN",
        quantity_before=5,
        quantity_after=15,
        quantity_changed=10,
        reason=None,
        notes=None,
        created_at=datetime.now(UTC),
    )
    row = MagicMock()
    row.__getitem__.side_effect = lambda index: movement if index == 0 else None
    row.product_name = "Widget"
    row.category_name = None
    row.username = "alice"

    item = to_history_item(row)

    assert item.movement_type == MovementType.STOCK_IN
    assert item.product_name == "Widget"
    assert item.category_name is None
    assert item.username == "alice"


def test_movements_are_append_only() -> None:
    assert event.contains(InventoryMovement, "before_update", _reject_mutation)
    assert event.contains(InventoryMovement, "before_delete", _reject_mutation)
    with pytest.raises(ValueError, match="append-only"):
        _reject_mutation(None, None, InventoryMovement())
