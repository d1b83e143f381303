from fastapi import APIRouter

from app.features.admin.routes.auth import router as auth_router
from app.features.admin.routes.dashboard import router as dashboard_router

router = APIRouter()

router.include_router(auth_router)
router.include_router(dashboard_router)
