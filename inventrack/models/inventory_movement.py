import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventrack.models.base import Base, CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from inventrack.models.product import Product
    from inventrack.models.user import User


class InventoryMovement(UUIDMixin, CreatedAtMixin, Base):
    """Append-only record of a single change to a product's quantity."""

    __tablename__ = "inventory_movements"
    __table_args__ = (
        CheckConstraint(
            "movement_type IN ('CREATE', 'UPDATE', 'DELETE', 'STOCK_IN', 'STOCK_OUT')",
            name="ck_inventory_movements_type_valid",
        ),
        CheckConstraint(
            "quantity_before >= 0 AND quantity_after >= 0",
            name="ck_inventory_movements_quantities_non_negative",
        ),
        CheckConstraint(
            "quantity_changed = quantity_after - quantity_before",
            name="ck_inventory_movements_change_consistent",
        ),
        Index("ix_inventory_movements_product_id_created_at", "product_id", "created_at"),
        Index("ix_inventory_movements_created_at", "created_at"),
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    movement_type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity_before: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_after: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_changed: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    product: Mapped["Product"] = relationship("Product")
    user: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return (
            f"<InventoryMovement id={self.id!r} type={self.movement_type!r} "
            f"change={self.quantity_changed!r}>"
        )


@event.listens_for(InventoryMovement, "before_update")
@event.listens_for(InventoryMovement, "before_delete")
def _reject_mutation(mapper, connection, target: InventoryMovement) -> None:  # noqa: ARG001
    raise ValueError("Inventory movements are append-only")
