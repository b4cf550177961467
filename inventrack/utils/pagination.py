"""Reusable async pagination utility for SQLAlchemy async sessions."""

import math
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.schemas.common import Pagination


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Return pagination metadata for a 1-based *page* of *limit* items out of *total*.

    ``total_pages`` is ``ceil(total / limit)``, so an empty result has zero pages.
    """
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


async def paginate(
    db: AsyncSession,
    query: Select[Any],
    page: int,
    limit: int,
    *,
    scalars: bool = True,
) -> tuple[list[Any], Pagination]:
    """Execute *query* for one page and return ``(rows, pagination)``.

    Args:
        db: Active async database session.
        query: A SQLAlchemy :func:`select` statement (without offset/limit applied).
        page: 1-based page number, already validated by the caller.
        limit: Page size, already validated by the caller.
        scalars: Return ORM entities (the default) instead of full result rows,
            for queries selecting more than one entity or labelled column.

    Returns:
        The rows of the requested page and the matching :class:`Pagination`.
    """
    # Count over a wrapping subquery; ORDER BY is irrelevant to the total.
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total: int = (await db.execute(count_query)).scalar_one()

    offset = (page - 1) * limit
    rows_result = await db.execute(query.offset(offset).limit(limit))
    rows = list(rows_result.scalars().all()) if scalars else list(rows_result.all())

    return rows, build_pagination(page, limit, total)
