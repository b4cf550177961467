"""Product endpoints: filtered listing, CRUD and stock adjustments.

Any authenticated user may list, read and create products. Updating, deleting
and adjusting stock is limited to the product's creator and admins.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.dependencies import AuthContext, get_current_user, get_db
from inventrack.enums import StockStatus
from inventrack.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from inventrack.schemas.movement import MovementResponse
from inventrack.schemas.product import (
    ProductCreate,
    ProductData,
    ProductListData,
    ProductResponse,
    ProductUpdate,
    StockAdjustmentData,
    StockAdjustmentRequest,
)
from inventrack.services import products as product_service

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)

_OWNER_ONLY = {
    403: {"model": ErrorResponse, "description": "Only the creator or an admin may modify"},
    404: {"model": ErrorResponse, "description": "Product not found"},
}


@router.get("", response_model=ApiResponse[ProductListData])
async def list_products(
    search: str | None = Query(None, max_length=255),  # noqa: B008
    category_id: uuid.UUID | None = Query(None),  # noqa: B008
    stock_status: StockStatus | None = Query(None),  # noqa: B008
    page: int = Query(1, ge=1),  # noqa: B008
    limit: int = Query(20, ge=1, le=100),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[ProductListData]:
    """Return active products, newest first.

    ``search`` matches name or description case-insensitively. ``stock_status``
    filters on the derived LOW / MEDIUM / HIGH classification.
    """
    products, pagination = await product_service.list_products(
        db,
        search=search,
        category_id=category_id,
        stock_status=stock_status,
        page=page,
        limit=limit,
    )
    return ApiResponse(
        data=ProductListData(
            products=[ProductResponse.model_validate(p) for p in products],
            pagination=pagination,
            filters=product_service.applied_filters(
                search=search, category_id=category_id, stock_status=stock_status
            ),
        )
    )


@router.get(
    "/{product_id}",
    response_model=ApiResponse[ProductData],
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[ProductData]:
    product = await product_service.get_product(db, product_id)
    return ApiResponse(data=ProductData(product=ProductResponse.model_validate(product)))


@router.post(
    "",
    response_model=ApiResponse[ProductData],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or category"},
        409: {"model": ErrorResponse, "description": "Barcode already in use"},
    },
)
async def create_product(
    body: ProductCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[ProductData]:
    """Create a product owned by the caller and record its initial stock."""
    product = await product_service.create_product(db, body, ctx)
    return ApiResponse(
        message="Product created successfully",
        data=ProductData(product=ProductResponse.model_validate(product)),
    )


@router.put(
    "/{product_id}",
    response_model=ApiResponse[ProductData],
    responses={
        **_OWNER_ONLY,
        400: {"model": ErrorResponse, "description": "Invalid input or category"},
        409: {"model": ErrorResponse, "description": "Barcode already in use"},
    },
)
async def update_product(
    product_id: uuid.UUID,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[ProductData]:
    """Replace a product.  Every field must be sent; partial updates are not supported."""
    product = await product_service.update_product(db, product_id, body, ctx)
    return ApiResponse(
        message="Product updated successfully",
        data=ProductData(product=ProductResponse.model_validate(product)),
    )


@router.delete("/{product_id}", response_model=MessageResponse, responses=_OWNER_ONLY)
async def delete_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    """Soft-delete a product and record the stock leaving the inventory."""
    await product_service.delete_product(db, product_id, ctx)
    return MessageResponse(message="Product deleted successfully")


@router.post(
    "/{product_id}/stock",
    response_model=ApiResponse[StockAdjustmentData],
    responses={
        **_OWNER_ONLY,
        400: {"model": ErrorResponse, "description": "Insufficient stock"},
    },
)
async def adjust_stock(
    product_id: uuid.UUID,
    body: StockAdjustmentRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[StockAdjustmentData]:
    """Receive (``STOCK_IN``) or issue (``STOCK_OUT``) stock."""
    product, movement = await product_service.adjust_stock(db, product_id, body, ctx)
    return ApiResponse(
        message="Stock adjusted successfully",
        data=StockAdjustmentData(
            product=ProductResponse.model_validate(product),
            movement=MovementResponse.model_validate(movement),
        ),
    )
