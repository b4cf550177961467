"""Reporting aggregator: read-only queries over active products and categories."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Numeric, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.enums import StockStatus
from inventrack.models import Category, Product, User
from inventrack.schemas.report import (
    CategoryDistribution,
    DashboardData,
    DashboardStats,
    InventoryItem,
    InventoryReport,
    InventorySummary,
    LowStockItem,
    QuickStats,
    ValuableItem,
)
from inventrack.services.movements import movement_history_query, to_history_item
from inventrack.utils.stock import classify_stock, stock_status_condition

_ACTIVE = Product.is_active.is_(True)
_VALUE = Product.price * Product.quantity
_LOW = stock_status_condition(StockStatus.LOW, Product.quantity, Product.min_stock)


def _money(value: object) -> Decimal:
    return Decimal(value or 0).quantize(Decimal("0.01"))


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar_one()


async def dashboard_stats(db: AsyncSession) -> DashboardStats:
    products = (
        await db.execute(
            select(
                func.count(Product.id).label("total_products"),
                func.coalesce(func.sum(_VALUE), 0).label("total_value"),
                func.count(Product.id).filter(_LOW).label("low_stock_count"),
            ).where(_ACTIVE)
        )
    ).one()
    total_categories = await _count(
        db, select(func.count(Category.id)).where(Category.is_active.is_(True))
    )
    total_users = await _count(db, select(func.count(User.id)).where(User.is_active.is_(True)))

    return DashboardStats(
        total_products=products.total_products,
        total_categories=total_categories,
        total_users=total_users,
        total_inventory_value=_money(products.total_value),
        low_stock_count=products.low_stock_count,
    )


async def low_stock_products(db: AsyncSession, top: int) -> list[LowStockItem]:
    """LOW products, most depleted first.  A zero ``min_stock`` sorts last."""
    ratio = cast(Product.quantity, Numeric) / func.nullif(Product.min_stock, 0)
    rows = await db.execute(
        select(
            Product.id,
            Product.name,
            Product.quantity,
            Product.min_stock,
            Category.name.label("category_name"),
            ratio.label("stock_ratio"),
        )
        .outerjoin(Category, Product.category_id == Category.id)
        .where(_ACTIVE, _LOW)
        .order_by(ratio.asc().nulls_last(), Product.name)
        .limit(top)
    )
    return [
        LowStockItem(
            id=row.id,
            name=row.name,
            quantity=row.quantity,
            min_stock=row.min_stock,
            category_name=row.category_name,
            stock_ratio=float(row.stock_ratio) if row.stock_ratio is not None else None,
        )
        for row in rows
    ]


async def valuable_products(db: AsyncSession, top: int) -> list[ValuableItem]:
    rows = await db.execute(
        select(
            Product.id,
            Product.name,
            Product.price,
            Product.quantity,
            _VALUE.label("total_value"),
            Category.name.label("category_name"),
        )
        .outerjoin(Category, Product.category_id == Category.id)
        .where(_ACTIVE)
        .order_by(_VALUE.desc(), Product.name)
        .limit(top)
    )
    return [
        ValuableItem(
            id=row.id,
            name=row.name,
            price=row.price,
            quantity=row.quantity,
            total_value=_money(row.total_value),
            category_name=row.category_name,
        )
        for row in rows
    ]


async def category_distribution(db: AsyncSession) -> list[CategoryDistribution]:
    rows = await db.execute(
        select(
            Category.id,
            Category.name,
            func.count(Product.id).label("product_count"),
            func.coalesce(func.sum(Product.quantity), 0).label("total_quantity"),
            func.coalesce(func.sum(_VALUE), 0).label("total_value"),
        )
        .outerjoin(Product, (Product.category_id == Category.id) & _ACTIVE)
        .where(Category.is_active.is_(True))
        .group_by(Category.id, Category.name)
        .order_by(func.count(Product.id).desc(), Category.name)
    )
    return [
        CategoryDistribution(
            id=row.id,
            name=row.name,
            product_count=row.product_count,
            total_quantity=row.total_quantity,
            total_value=_money(row.total_value),
        )
        for row in rows
    ]


async def dashboard(db: AsyncSession, top: int = 10) -> DashboardData:
    """Assemble the dashboard: totals, top-N lists and the latest movements."""
    recent = await db.execute(
        movement_history_query().where(Product.is_active.is_(True)).limit(top)
    )
    return DashboardData(
        stats=await dashboard_stats(db),
        low_stock_products=await low_stock_products(db, top),
        valuable_products=await valuable_products(db, top),
        category_distribution=await category_distribution(db),
        recent_movements=[to_history_item(row) for row in recent],
    )


async def inventory_report(
    db: AsyncSession,
    *,
    category_id: uuid.UUID | None = None,
    stock_status: StockStatus | None = None,
) -> InventoryReport:
    """Every active product matching the filters, ordered by name, with a summary."""
    query = (
        select(
            Product,
            Category.name.label("category_name"),
            User.username.label("created_by_username"),
        )
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(User, Product.created_by == User.id)
        .where(_ACTIVE)
        .order_by(Product.name, Product.id)
    )
    if category_id is not None:
        query = query.where(Product.category_id == category_id)
    if stock_status is not None:
        query = query.where(stock_status_condition(stock_status, Product.quantity, Product.min_stock))

    items: list[InventoryItem] = []
    for row in await db.execute(query):
        product: Product = row[0]
        items.append(
            InventoryItem(
                id=product.id,
                name=product.name,
                description=product.description,
                barcode=product.barcode,
                price=product.price,
                quantity=product.quantity,
                min_stock=product.min_stock,
                category_id=product.category_id,
                category_name=row.category_name,
                created_by_username=row.created_by_username,
                stock_status=classify_stock(product.quantity, product.min_stock),
                total_value=_money(product.price * product.quantity),
                created_at=product.created_at,
                updated_at=product.updated_at,
            )
        )

    by_status = {status: 0 for status in StockStatus}
    for item in items:
        by_status[item.stock_status] += 1

    summary = InventorySummary(
        total_products=len(items),
        total_value=_money(sum((item.total_value for item in items), Decimal(0))),
        total_quantity=sum(item.quantity for item in items),
        low_stock_count=by_status[StockStatus.LOW],
        medium_stock_count=by_status[StockStatus.MEDIUM],
        high_stock_count=by_status[StockStatus.HIGH],
    )
    filters = {
        key: str(value)
        for key, value in (("category_id", category_id), ("stock_status", stock_status))
        if value is not None
    }
    return InventoryReport(
        products=items,
        summary=summary,
        filters=filters,
        generated_at=datetime.now(UTC),
    )


async def quick_stats(db: AsyncSession) -> QuickStats:
    row = (
        await db.execute(
            select(
                func.count(Product.id).label("total_products"),
                func.coalesce(func.sum(Product.quantity), 0).label("total_quantity"),
                func.coalesce(func.sum(_VALUE), 0).label("total_value"),
                func.coalesce(func.avg(Product.price), 0).label("average_price"),
                func.count(Product.id).filter(_LOW).label("low_stock_count"),
            ).where(_ACTIVE)
        )
    ).one()
    return QuickStats(
        total_products=row.total_products,
        total_quantity=row.total_quantity,
        total_inventory_value=_money(row.total_value),
        average_price=_money(row.average_price),
        low_stock_count=row.low_stock_count,
    )
