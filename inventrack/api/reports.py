"""Read-only reporting endpoints."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inventrack.dependencies import AuthContext, get_current_user, get_db
from inventrack.enums import MovementType, StockStatus
from inventrack.schemas.common import ApiResponse, ErrorResponse
from inventrack.schemas.movement import MovementListData
from inventrack.schemas.report import DashboardData, InventoryReport, QuickStats
from inventrack.services import reports as report_service
from inventrack.services.movements import list_movements

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)


@router.get("/dashboard", response_model=ApiResponse[DashboardData])
async def dashboard(
    top: int = Query(10, ge=1, le=50),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[DashboardData]:
    """Return dashboard totals plus the ``top`` lowest-stock and highest-value products."""
    return ApiResponse(data=await report_service.dashboard(db, top=top))


@router.get("/inventory", response_model=ApiResponse[InventoryReport])
async def inventory(
    category_id: uuid.UUID | None = Query(None),  # noqa: B008
    stock_status: StockStatus | None = Query(None),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[InventoryReport]:
    """Return every active product matching the filters, ordered by name."""
    report = await report_service.inventory_report(
        db, category_id=category_id, stock_status=stock_status
    )
    return ApiResponse(data=report)


@router.get("/movements", response_model=ApiResponse[MovementListData])
async def movements(
    product_id: uuid.UUID | None = Query(None),  # noqa: B008
    movement_type: MovementType | None = Query(None),  # noqa: B008
    user_id: uuid.UUID | None = Query(None),  # noqa: B008
    start_date: datetime | None = Query(None),  # noqa: B008
    end_date: datetime | None = Query(None),  # noqa: B008
    page: int = Query(1, ge=1),  # noqa: B008
    limit: int = Query(50, ge=1, le=200),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[MovementListData]:
    """Return movement history, newest first."""
    items, pagination = await list_movements(
        db,
        product_id=product_id,
        movement_type=movement_type,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return ApiResponse(data=MovementListData(movements=items, pagination=pagination))


@router.get("/stats", response_model=ApiResponse[QuickStats])
async def stats(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    ctx: AuthContext = Depends(get_current_user),  # noqa: B008
) -> ApiResponse[QuickStats]:
    return ApiResponse(data=await report_service.quick_stats(db))
