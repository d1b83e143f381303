from fastapi import APIRouter

from app.features.admin.routes import router as admin_router
from app.features.banners.routes.banners import router as banners_router
from app.features.service_catalog.routes.services import router as services_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(admin_router)
api_router.include_router(services_router)
api_router.include_router(banners_router)
