from typing import TYPE_CHECKING

from sqlalchemy import Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventrack.models.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from inventrack.models.product import Product


class Category(UUIDMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    products: Mapped[list["Product"]] = relationship(
        "Product",
        back_populates="category",
    )

    def __repr__(self) -> str:
        return f"<Category id={self.id!r} name={self.name!r}>"


# Names are unique case-insensitively, but only among active categories so a
# soft-deleted name can be reused.
Index(
    "uq_categories_name_lower_active",
    func.lower(Category.name),
    unique=True,
    postgresql_where=Category.is_active.is_(True),
)
