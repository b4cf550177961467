from inventrack.models.base import Base
from inventrack.models.category import Category
from inventrack.models.inventory_movement import InventoryMovement
from inventrack.models.product import Product
from inventrack.models.user import User

__all__ = [
    "Base",
    "Category",
    "InventoryMovement",
    "Product",
    "User",
]
