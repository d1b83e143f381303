from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin
from app.features.admin.services.dashboard import AdminDashboardService
from app.features.admin.utils.auth import require_admin, require_super_admin
from app.platform.cache.keys import DASHBOARD_SHARED, DASHBOARD_SUPER, CacheKey
from app.platform.cache.service import CacheService, get_cache
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/dashboard", tags=["Admin - Dashboard"])

DASHBOARD_TTL = 5 * 60

# Producers share one AsyncSession, so cached reads are awaited one at a time.


@router.get(
    "/admin",
    summary="Dashboard for any admin",
)
async def get_admin_dashboard(
    current_admin: Admin = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Returns:
    - Total number of admin accounts
    - Content statistics for services and banners
    """
    service = AdminDashboardService(db)
    total_admins = await cache.get_cached_data(
        CacheKey(DASHBOARD_SHARED, "totalAdmins"), DASHBOARD_TTL, service.fetch_total_admins_count
    )
    content = await cache.get_cached_data(
        CacheKey(DASHBOARD_SHARED, "stats"), DASHBOARD_TTL, service.fetch_content_stats
    )

    return api_response(
        data={"total_admins": total_admins, "content": content},
        message="Admin dashboard retrieved successfully",
    )


@router.get(
    "/super-admin",
    summary="Dashboard for the super admin",
)
async def get_super_admin_dashboard(
    current_admin: Admin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Returns:
    - Every admin account
    - Total number of admin accounts
    - Content statistics for services and banners
    """
    service = AdminDashboardService(db)
    admins = await cache.get_cached_data(
        CacheKey(DASHBOARD_SUPER, "admins"), DASHBOARD_TTL, service.fetch_all_admins
    )
    total_admins = await cache.get_cached_data(
        CacheKey(DASHBOARD_SHARED, "totalAdmins"), DASHBOARD_TTL, service.fetch_total_admins_count
    )
    content = await cache.get_cached_data(
        CacheKey(DASHBOARD_SHARED, "stats"), DASHBOARD_TTL, service.fetch_content_stats
    )

    return api_response(
        data={
            "admins": admins,
            "count": len(admins),
            "total_admins": total_admins,
            "content": content,
        },
        message="Super admin dashboard retrieved successfully",
    )
