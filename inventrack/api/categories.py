"""Category endpoints: listing with optional product stats, CRUD and guarded soft-delete."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.dependencies import AuthContext, get_current_user, get_db
from inventrack.schemas.category import (
    CategoryCreate,
    CategoryData,
    CategoryListData,
    CategoryResponse,
    CategoryUpdate,
)
from inventrack.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from inventrack.services import categories as category_service

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Category not found"}}
_DUPLICATE = {409: {"model": ErrorResponse, "description": "Category name already exists"}}


@router.get("", response_model=ApiResponse[CategoryListData])
async def list_categories(
    search: str | None = Query(None, max_length=100),  # noqa: B008
    include_stats: bool = Query(False),  # noqa: B008
    page: int = Query(1, ge=1),  # noqa: B008
    limit: int = Query(20, ge=1, le=100),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[CategoryListData]:
    """Return active categories, newest first.

    With ``include_stats=true`` each category carries ``product_count``,
    ``total_quantity`` and ``total_value`` over its active products.
    """
    categories, pagination = await category_service.list_categories(
        db, search=search, include_stats=include_stats, page=page, limit=limit
    )
    return ApiResponse(data=CategoryListData(categories=categories, pagination=pagination))


@router.get("/{category_id}", response_model=ApiResponse[CategoryData], responses=_NOT_FOUND)
async def get_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[CategoryData]:
    """Return one active category with its product stats."""
    category = await category_service.get_category(db, category_id)
    return ApiResponse(data=CategoryData(category=category))


@router.post(
    "",
    response_model=ApiResponse[CategoryData],
    status_code=status.HTTP_201_CREATED,
    responses=_DUPLICATE,
)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[CategoryData]:
    """Create a category.  Names are unique among active categories, ignoring case."""
    category = await category_service.create_category(db, body)
    return ApiResponse(
        message="Category created successfully",
        data=CategoryData(category=CategoryResponse.model_validate(category)),
    )


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryData],
    responses={**_NOT_FOUND, **_DUPLICATE},
)
async def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[CategoryData]:
    """Replace a category's name and description."""
    category = await category_service.update_category(db, category_id, body)
    return ApiResponse(
        message="Category updated successfully",
        data=CategoryData(category=CategoryResponse.model_validate(category)),
    )


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    responses={
        **_NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Category still has active products"},
    },
)
async def delete_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    """Soft-delete a category.  Refused while any active product references it."""
    await category_service.delete_category(db, category_id)
    return MessageResponse(message="Category deleted successfully")
