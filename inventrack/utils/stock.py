"""Stock-status classification, shared by Python serialization and SQL filters.

A product is ``LOW`` while ``quantity <= min_stock``, ``MEDIUM`` while
``quantity <= 2 * min_stock`` and ``HIGH`` above that.
"""

from typing import Any

from sqlalchemy import ColumnElement, and_

from inventrack.enums import StockStatus


def classify_stock(quantity: int, min_stock: int) -> StockStatus:
    if quantity <= min_stock:
        return StockStatus.LOW
    if quantity <= min_stock * 2:
        return StockStatus.MEDIUM
    return StockStatus.HIGH


def stock_status_condition(
    status: StockStatus,
    quantity: ColumnElement[Any],
    min_stock: ColumnElement[Any],
) -> ColumnElement[bool]:
    """Return a WHERE clause selecting rows whose derived status equals *status*."""
    if status == StockStatus.LOW:
        return quantity <= min_stock
    if status == StockStatus.MEDIUM:
        return and_(quantity > min_stock, quantity <= min_stock * 2)
    return quantity > min_stock * 2
