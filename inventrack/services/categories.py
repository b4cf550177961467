"""Category service: listing with optional product stats, CRUD and guarded soft-delete."""

import logging
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.errors import ConflictError, NotFoundError, ValidationError, from_integrity_error
from inventrack.models import Category, Product
from inventrack.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from inventrack.schemas.common import Pagination
from inventrack.utils.pagination import paginate
from inventrack.utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)

_NAME_TAKEN = "Category with this name already exists"


def _with_stats(query: Select[Any]) -> Select[Any]:
    """Attach per-category aggregates over active products to *query*."""
    stats = (
        select(
            Product.category_id.label("category_id"),
            func.count(Product.id).label("product_count"),
            func.coalesce(func.sum(Product.quantity), 0).label("total_quantity"),
            func.coalesce(func.sum(Product.price * Product.quantity), 0).label("total_value"),
        )
        .where(Product.is_active.is_(True))
        .group_by(Product.category_id)
        .subquery()
    )
    return query.outerjoin(stats, stats.c.category_id == Category.id).add_columns(
        func.coalesce(stats.c.product_count, 0).label("product_count"),
        func.coalesce(stats.c.total_quantity, 0).label("total_quantity"),
        func.coalesce(stats.c.total_value, 0).label("total_value"),
    )


def _stats_response(row: Any) -> CategoryResponse:
    response = CategoryResponse.model_validate(row[0])
    response.product_count = int(row.product_count)
    response.total_quantity = int(row.total_quantity)
    response.total_value = Decimal(row.total_value)
    return response


async def _ensure_name_free(
    db: AsyncSession,
    name: str,
    exclude_id: uuid.UUID | None = None,
) -> None:
    query = select(Category.id).where(
        func.lower(Category.name) == name.lower(),
        Category.is_active.is_(True),
    )
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise ConflictError(_NAME_TAKEN)


async def _get_active(
    db: AsyncSession,
    category_id: uuid.UUID,
    *,
    lock: bool = False,
) -> Category:
    query = select(Category).where(Category.id == category_id, Category.is_active.is_(True))
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise from_integrity_error(exc, conflict_message=_NAME_TAKEN) from None


async def list_categories(
    db: AsyncSession,
    *,
    search: str | None = None,
    include_stats: bool = False,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[CategoryResponse], Pagination]:
    """Return one page of active categories, newest first."""
    query: Select[Any] = select(Category).where(Category.is_active.is_(True))
    if search:
        pattern = contains_pattern(search)
        query = query.where(
            Category.name.ilike(pattern, escape=LIKE_ESCAPE)
            | Category.description.ilike(pattern, escape=LIKE_ESCAPE)
        )
    query = query.order_by(Category.created_at.desc(), Category.id)

    if not include_stats:
        categories, pagination = await paginate(db, query, page, limit)
        return [CategoryResponse.model_validate(c) for c in categories], pagination

    rows, pagination = await paginate(db, _with_stats(query), page, limit, scalars=False)
    return [_stats_response(row) for row in rows], pagination


async def get_category(
    db: AsyncSession,
    category_id: uuid.UUID,
    *,
    include_stats: bool = True,
) -> CategoryResponse:
    if not include_stats:
        return CategoryResponse.model_validate(await _get_active(db, category_id))

    query: Select[Any] = select(Category).where(
        Category.id == category_id,
        Category.is_active.is_(True),
    )
    row = (await db.execute(_with_stats(query))).one_or_none()
    if row is None:
        raise NotFoundError("Category not found")
    return _stats_response(row)


async def create_category(db: AsyncSession, body: CategoryCreate) -> Category:
    """Insert a category.

    Raises:
        ConflictError: an active category already has this name, ignoring case.
    """
    await _ensure_name_free(db, body.name)

    category = Category(name=body.name, description=body.description)
    db.add(category)
    await _commit(db)
    await db.refresh(category)

    logger.info("Category %s created: %s", category.id, category.name)
    return category


async def update_category(
    db: AsyncSession,
    category_id: uuid.UUID,
    body: CategoryUpdate,
) -> Category:
    category = await _get_active(db, category_id)
    await _ensure_name_free(db, body.name, exclude_id=category_id)

    category.name = body.name
    category.description = body.description
    await _commit(db)
    await db.refresh(category)

    logger.info("Category %s updated", category_id)
    return category


async def delete_category(db: AsyncSession, category_id: uuid.UUID) -> None:
    """Soft-delete a category that no active product references.

    Raises:
        NotFoundError: the category is missing or already inactive.
        ValidationError: one or more active products still use it; the message
            carries the exact count.
    """
    # Product writers hold FOR SHARE on the category, so the count below is stable.
    category = await _get_active(db, category_id, lock=True)

    in_use: int = (
        await db.execute(
            select(func.count())
            .select_from(Product)
            .where(Product.category_id == category_id, Product.is_active.is_(True))
        )
    ).scalar_one()
    if in_use:
        noun = "product" if in_use == 1 else "products"
        logger.warning("Refused to delete category %s: %d active %s", category_id, in_use, noun)
        raise ValidationError(
            f"Cannot delete category: it has {in_use} active {noun}. "
            "Reassign or delete them first."
        )

    category.is_active = False
    await db.commit()
    logger.info("Category %s deleted", category_id)
