"""Product service: filtered listing, CRUD and stock adjustments.

Every mutation that touches ``quantity`` locks the product row with
``SELECT ... FOR UPDATE``, records its :class:`InventoryMovement` through
:func:`record_movement` and commits both in a single transaction.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import Select, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inventrack.dependencies import AuthContext, ensure_can_modify
from inventrack.enums import MovementType, StockStatus
from inventrack.errors import ConflictError, NotFoundError, ValidationError, from_integrity_error
from inventrack.models import Category, InventoryMovement, Product
from inventrack.schemas.common import Pagination
from inventrack.schemas.product import (
    MAX_QUANTITY,
    ProductCreate,
    ProductUpdate,
    StockAdjustmentRequest,
)
from inventrack.services.movements import record_movement
from inventrack.utils.pagination import paginate
from inventrack.utils.search import LIKE_ESCAPE, contains_pattern
from inventrack.utils.stock import stock_status_condition

logger = logging.getLogger(__name__)

_BARCODE_TAKEN = "Product with this barcode already exists"
_INVALID_CATEGORY = "Invalid category: category does not exist or is inactive"


def _product_with_relations() -> Select[tuple[Product]]:
    """Return a base select for Product with category and creator eager-loaded."""
    return select(Product).options(
        selectinload(Product.category),
        selectinload(Product.creator),
    )


async def _reload(db: AsyncSession, product_id: uuid.UUID) -> Product:
    # populate_existing overwrites server-side values expired by the commit.
    result = await db.execute(
        _product_with_relations()
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _lock_active_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    result = await db.execute(
        select(Product)
        .where(Product.id == product_id, Product.is_active.is_(True))
        .with_for_update()
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFoundError("Product not found")
    return product


async def _ensure_active_category(db: AsyncSession, category_id: uuid.UUID) -> None:
    # FOR SHARE blocks a concurrent category delete until this transaction ends.
    result = await db.execute(
        select(Category.id)
        .where(Category.id == category_id, Category.is_active.is_(True))
        .with_for_update(read=True)
    )
    if result.scalar_one_or_none() is None:
        raise ValidationError(
            _INVALID_CATEGORY,
            errors=[{"msg": _INVALID_CATEGORY, "param": "category_id", "value": str(category_id)}],
        )


async def _ensure_barcode_free(
    db: AsyncSession,
    barcode: str | None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    if not barcode:
        return
    query = select(Product.id).where(Product.barcode == barcode, Product.is_active.is_(True))
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise ConflictError(_BARCODE_TAKEN)


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise from_integrity_error(
            exc,
            conflict_message=_BARCODE_TAKEN,
            invalid_message=_INVALID_CATEGORY,
        ) from None


async def list_products(
    db: AsyncSession,
    *,
    search: str | None = None,
    category_id: uuid.UUID | None = None,
    stock_status: StockStatus | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Product], Pagination]:
    """Return one page of active products, newest first.

    ``search`` is a case-insensitive substring match over name and description;
    ``stock_status`` is evaluated in SQL with the same thresholds used for
    serialization.
    """
    query = _product_with_relations().where(Product.is_active.is_(True))

    if search:
        pattern = contains_pattern(search)
        query = query.where(
            or_(
                Product.name.ilike(pattern, escape=LIKE_ESCAPE),
                Product.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if category_id is not None:
        query = query.where(Product.category_id == category_id)
    if stock_status is not None:
        query = query.where(stock_status_condition(stock_status, Product.quantity, Product.min_stock))

    query = query.order_by(Product.created_at.desc(), Product.id)
    return await paginate(db, query, page, limit)


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    result = await db.execute(
        _product_with_relations().where(Product.id == product_id, Product.is_active.is_(True))
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFoundError("Product not found")
    return product


async def create_product(db: AsyncSession, body: ProductCreate, ctx: AuthContext) -> Product:
    """Insert a product and its ``CREATE`` movement (``0 -> quantity``) atomically.

    Raises:
        ValidationError: the category is missing or inactive.
        ConflictError: another active product already uses the barcode.
    """
    await _ensure_active_category(db, body.category_id)
    await _ensure_barcode_free(db, body.barcode)

    product = Product(
        name=body.name,
        description=body.description,
        category_id=body.category_id,
        price=body.price,
        quantity=body.quantity,
        min_stock=body.min_stock,
        barcode=body.barcode,
        created_by=ctx.user_id,
    )
    db.add(product)
    await db.flush()  # assign PK before the movement row

    await record_movement(
        db,
        product_id=product.id,
        user_id=ctx.user_id,
        movement_type=MovementType.CREATE,
        quantity_before=0,
        quantity_after=body.quantity,
        reason="Product created",
    )
    await _commit(db)

    logger.info("Product %s created by %s with quantity %d", product.id, ctx.user_id, body.quantity)
    return await _reload(db, product.id)


async def update_product(
    db: AsyncSession,
    product_id: uuid.UUID,
    body: ProductUpdate,
    ctx: AuthContext,
) -> Product:
    """Replace every editable field of a product.

    An ``UPDATE`` movement is recorded only when the quantity actually changes.
    """
    product = await _lock_active_product(db, product_id)
    ensure_can_modify(product, ctx)
    await _ensure_active_category(db, body.category_id)
    await _ensure_barcode_free(db, body.barcode, exclude_id=product_id)

    quantity_before = product.quantity

    product.name = body.name
    product.description = body.description
    product.category_id = body.category_id
    product.price = body.price
    product.quantity = body.quantity
    product.min_stock = body.min_stock
    product.barcode = body.barcode

    if body.quantity != quantity_before:
        await record_movement(
            db,
            product_id=product.id,
            user_id=ctx.user_id,
            movement_type=MovementType.UPDATE,
            quantity_before=quantity_before,
            quantity_after=body.quantity,
            reason=body.reason or "Product updated",
            notes=body.notes,
        )
    await _commit(db)

    logger.info("Product %s updated by %s", product_id, ctx.user_id)
    return await _reload(db, product_id)


async def delete_product(db: AsyncSession, product_id: uuid.UUID, ctx: AuthContext) -> None:
    """Soft-delete a product and record a ``DELETE`` movement ``quantity -> 0``.

    The stored quantity is left as it was so the row still shows what was on
    hand when it was retired.
    """
    product = await _lock_active_product(db, product_id)
    ensure_can_modify(product, ctx)

    product.is_active = False
    await record_movement(
        db,
        product_id=product.id,
        user_id=ctx.user_id,
        movement_type=MovementType.DELETE,
        quantity_before=product.quantity,
        quantity_after=0,
        reason="Product deleted",
    )
    await _commit(db)

    logger.info("Product %s deleted by %s", product_id, ctx.user_id)


async def adjust_stock(
    db: AsyncSession,
    product_id: uuid.UUID,
    body: StockAdjustmentRequest,
    ctx: AuthContext,
) -> tuple[Product, InventoryMovement]:
    """Apply a ``STOCK_IN`` or ``STOCK_OUT`` to a product.

    Raises:
        NotFoundError: the product is missing or inactive.
        AuthorizationError: the caller is neither the creator nor an admin.
        ValidationError: a ``STOCK_OUT`` would take the quantity below zero, or a
            ``STOCK_IN`` would take it past the column maximum.
    """
    product = await _lock_active_product(db, product_id)
    ensure_can_modify(product, ctx)

    quantity_before = product.quantity
    if body.movement_type == MovementType.STOCK_OUT:
        if body.quantity > quantity_before:
            message = f"Insufficient stock: available {quantity_before}, requested {body.quantity}"
            raise ValidationError(
                message,
                errors=[{"msg": message, "param": "quantity", "value": body.quantity}],
            )
        quantity_after = quantity_before - body.quantity
    else:
        quantity_after = quantity_before + body.quantity
        if quantity_after > MAX_QUANTITY:
            message = (
                f"Stock limit exceeded: available {quantity_before}, requested {body.quantity}, "
                f"maximum {MAX_QUANTITY}"
            )
            raise ValidationError(
                message,
                errors=[{"msg": message, "param": "quantity", "value": body.quantity}],
            )

    product.quantity = quantity_after
    movement = await record_movement(
        db,
        product_id=product.id,
        user_id=ctx.user_id,
        movement_type=MovementType(body.movement_type),
        quantity_before=quantity_before,
        quantity_after=quantity_after,
        reason=body.reason,
        notes=body.notes,
    )
    await _commit(db)

    logger.info(
        "Stock %s of %d on product %s by %s (%d -> %d)",
        body.movement_type,
        body.quantity,
        product_id,
        ctx.user_id,
        quantity_before,
        quantity_after,
    )
    return await _reload(db, product_id), movement


def applied_filters(**filters: Any) -> dict[str, Any]:
    """Echo back the filters a list call actually applied, dropping empty ones."""
    return {key: str(value) for key, value in filters.items() if value not in (None, "")}
