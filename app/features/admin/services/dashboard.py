from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin, AdminRole
from app.features.admin.schemas.dashboard import AdminListItem, ContentStats
from app.features.banners.models.banner import Banner
from app.features.service_catalog.models.service import Service


class AdminDashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_all_admins(self) -> List[dict]:
        """Every plain admin account, newest first. The super admin is not listed."""
        result = await self.db.execute(
            select(Admin)
            .where(Admin.role == AdminRole.admin.value)
            .order_by(Admin.created_at.desc())
        )
        return [AdminListItem.model_validate(a).model_dump() for a in result.scalars().all()]

    async def fetch_total_admins_count(self) -> int:
        return (
            await self.db.scalar(
                select(func.count(Admin.id)).where(Admin.role == AdminRole.admin.value)
            )
            or 0
        )

    async def fetch_content_stats(self) -> dict:
        total_services = await self.db.scalar(select(func.count(Service.id))) or 0
        published_services = (
            await self.db.scalar(
                select(func.count(Service.id)).where(Service.is_published.is_(True))
            )
            or 0
        )
        homepage_services = (
            await self.db.scalar(
                select(func.count(Service.id)).where(
                    Service.is_published.is_(True), Service.show_on_homepage.is_(True)
                )
            )
            or 0
        )
        total_banners = await self.db.scalar(select(func.count(Banner.id))) or 0
        active_banners = (
            await self.db.scalar(select(func.count(Banner.id)).where(Banner.is_active.is_(True)))
            or 0
        )

        return ContentStats(
            total_services=total_services,
            published_services=published_services,
            homepage_services=homepage_services,
            total_banners=total_banners,
            active_banners=active_banners,
        ).model_dump()
