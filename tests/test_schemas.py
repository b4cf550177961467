"""Tests for request validation and derived response fields in inventrack/schemas."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from inventrack.enums import MovementType
from inventrack.schemas.product import (
    MAX_QUANTITY,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StockAdjustmentRequest,
)


def _product_body(**overrides) -> dict:
    body = {
        "name": "Widget",
        "category_id": str(uuid.uuid4()),
        "price": "9.99",
        "quantity": 5,
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# ProductCreate / ProductUpdate
# ---------------------------------------------------------------------------


class TestProductWrite:
    def test_defaults(self) -> None:
        body = ProductCreate.model_validate(_product_body())
        assert body.min_stock == 10
        assert body.barcode is None
        assert body.description is None
        assert body.price == Decimal("9.99")

    def test_name_is_trimmed(self) -> None:
        assert ProductCreate.model_validate(_product_body(name="  Widget  ")).name == "Widget"

    def test_blank_barcode_becomes_none(self) -> None:
        assert ProductCreate.model_validate(_product_body(barcode="   ")).barcode is None

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("name", "W"),
            ("name", "x" * 256),
            ("price", "-0.01"),
            ("price", "1.234"),
            ("price", "123456789.00"),
            ("quantity", -1),
            ("min_stock", -1),
            ("quantity", MAX_QUANTITY + 1),
            ("min_stock", MAX_QUANTITY + 1),
            ("barcode", "9" * 51),
            ("category_id", "not-a-uuid"),
        ],
    )
    def test_rejects_invalid_field(self, field: str, value: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ProductCreate.model_validate(_product_body(**{field: value}))
        assert exc_info.value.errors()[0]["loc"] == (field,)

    def test_zero_price_and_quantity_allowed(self) -> None:
        body = ProductCreate.model_validate(_product_body(price="0", quantity=0, min_stock=0))
        assert body.price == Decimal("0")
        assert body.quantity == 0

    def test_integer_column_maximum_allowed(self) -> None:
        body = ProductCreate.model_validate(
            _product_body(quantity=MAX_QUANTITY, min_stock=MAX_QUANTITY)
        )
        assert body.quantity == 2_147_483_647

    def test_update_requires_full_record(self) -> None:
        with pytest.raises(ValidationError):
            ProductUpdate.model_validate({"name": "Only a name"})

    def test_update_accepts_reason_and_notes(self) -> None:
        body = ProductUpdate.model_validate(_product_body(reason="Recount", notes="Shelf B"))
        assert body.reason == "Recount"
        assert body.notes == "Shelf B"


# ---------------------------------------------------------------------------
# StockAdjustmentRequest
# ---------------------------------------------------------------------------


class TestStockAdjustmentRequest:
    @pytest.mark.parametrize("movement_type", ["STOCK_IN", "STOCK_OUT"])
    def test_accepts_stock_types(self, movement_type: str) -> None:
        body = StockAdjustmentRequest.model_validate(
            {"movement_type": movement_type, "quantity": 1}
        )
        assert body.movement_type == MovementType(movement_type)

    @pytest.mark.parametrize("movement_type", ["CREATE", "UPDATE", "DELETE", "stock_in"])
    def test_rejects_other_types(self, movement_type: str) -> None:
        with pytest.raises(ValidationError):
            StockAdjustmentRequest.model_validate({"movement_type": movement_type, "quantity": 1})

    @pytest.mark.parametrize("quantity", [0, -5, MAX_QUANTITY + 1])
    def test_quantity_must_be_positive_and_in_range(self, quantity: int) -> None:
        with pytest.raises(ValidationError):
            StockAdjustmentRequest.model_validate({"movement_type": "STOCK_IN", "quantity": quantity})


# ---------------------------------------------------------------------------
# ProductResponse derived fields
# ---------------------------------------------------------------------------


def _response(quantity: int, min_stock: int, price: str = "9.99") -> ProductResponse:
    now = datetime.now(UTC)
    category_id = uuid.uuid4()
    user_id = uuid.uuid4()
    return ProductResponse(
        id=uuid.uuid4(),
        name="Widget",
        description=None,
        category_id=category_id,
        price=Decimal(price),
        quantity=quantity,
        min_stock=min_stock,
        barcode=None,
        is_active=True,
        created_by=user_id,
        created_at=now,
        updated_at=now,
        category={"id": category_id, "name": "Hardware"},
        creator={"id": user_id, "username": "alice"},
    )


class TestProductResponse:
    def test_total_value_is_price_times_quantity(self) -> None:
        assert _response(5, 10).total_value == Decimal("49.95")

    @pytest.mark.parametrize(
        ("quantity", "expected"), [(10, "LOW"), (11, "MEDIUM"), (20, "MEDIUM"), (21, "HIGH")]
    )
    def test_stock_status_follows_thresholds(self, quantity: int, expected: str) -> None:
        assert _response(quantity, 10).stock_status == expected

    def test_derived_fields_are_serialized(self) -> None:
        dumped = _response(5, 10).model_dump(mode="json")
        assert dumped["stock_status"] == "LOW"
        assert Decimal(dumped["total_value"]) == Decimal("49.95")
        assert dumped["category"]["name"] == "Hardware"
        assert dumped["creator"]["username"] == "alice"
