"""Main API router: mounts all sub-routers under /api/v1."""

from fastapi import APIRouter

from inventrack.api.auth import router as auth_router
from inventrack.api.categories import router as categories_router
from inventrack.api.health import router as health_router
from inventrack.api.products import router as products_router
from inventrack.api.reports import router as reports_router
from inventrack.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(products_router)
api_router.include_router(categories_router)
api_router.include_router(reports_router)
