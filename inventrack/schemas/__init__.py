from .auth import (
    AccessTokenResponse,
    AuthData,
    LoginRequest,
    ProfileData,
    ProfileResponse,
    ProfileUpdateRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
    UserData,
    UserResponse,
)
from .category import (
    CategoryCreate,
    CategoryData,
    CategoryListData,
    CategoryResponse,
    CategorySummary,
    CategoryUpdate,
)
from .common import ApiResponse, ErrorItem, ErrorResponse, MessageResponse, Pagination
from .health import HealthResponse, ReadinessResponse
from .movement import MovementHistoryItem, MovementListData, MovementResponse
from .product import (
    CreatorSummary,
    ProductCreate,
    ProductData,
    ProductListData,
    ProductResponse,
    ProductUpdate,
    StockAdjustmentData,
    StockAdjustmentRequest,
)
from .report import (
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
from .user import RoleUpdateRequest, StatusUpdateRequest, UserListData

__all__ = [
    # auth
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdateRequest",
    "RefreshRequest",
    "TokenPairResponse",
    "AccessTokenResponse",
    "UserResponse",
    "ProfileResponse",
    "AuthData",
    "UserData",
    "ProfileData",
    # category
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategorySummary",
    "CategoryData",
    "CategoryListData",
    # common
    "ApiResponse",
    "MessageResponse",
    "Pagination",
    "ErrorItem",
    "ErrorResponse",
    # health
    "HealthResponse",
    "ReadinessResponse",
    # movement
    "MovementResponse",
    "MovementHistoryItem",
    "MovementListData",
    # product
    "CreatorSummary",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductData",
    "ProductListData",
    "StockAdjustmentRequest",
    "StockAdjustmentData",
    # report
    "DashboardStats",
    "LowStockItem",
    "ValuableItem",
    "CategoryDistribution",
    "DashboardData",
    "InventoryItem",
    "InventorySummary",
    "InventoryReport",
    "QuickStats",
    # user
    "RoleUpdateRequest",
    "StatusUpdateRequest",
    "UserListData",
]
