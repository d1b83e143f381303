from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extension import uuid7

from app.features.admin.models.admin import Admin
from app.features.banners.models.banner import Banner
from app.features.banners.schemas.banner import (
    ActiveBanner,
    BannerCreate,
    BannerResponse,
    BannerUpdate,
)
from app.platform.cache.keys import BANNER_PUBLIC, DASHBOARD_SHARED, CacheKey
from app.platform.cache.service import CacheService
from app.platform.exceptions import NotFoundError, UpstreamError
from app.platform.logger import get_logger
from app.platform.response import paginate
from app.platform.storage.media import MediaStorage

logger = get_logger(__name__)

BANNER_FOLDER = "banners"

BANNER_CACHE_PATTERNS = (
    CacheKey.family(DASHBOARD_SHARED, "banners"),
    CacheKey.family(BANNER_PUBLIC, "active"),
    CacheKey.family(DASHBOARD_SHARED, "stats"),
)


class BannerService:
    def __init__(
        self,
        db: AsyncSession,
        cache: Optional[CacheService] = None,
        media: Optional[MediaStorage] = None,
    ):
        self.db = db
        self.cache = cache
        self.media = media

    async def fetch_active_banner(self) -> Optional[dict]:
        result = await self.db.execute(
            select(Banner)
            .where(Banner.is_active.is_(True))
            .order_by(Banner.created_at.desc())
            .limit(1)
        )
        banner = result.scalar_one_or_none()
        if banner is None:
            return None
        return ActiveBanner.model_validate(banner).model_dump()

    async def fetch_all_banners(
        self, page: int = 1, limit: int = 10, status: Optional[str] = None
    ) -> dict:
        filters = []
        if status == "active":
            filters.append(Banner.is_active.is_(True))
        elif status == "inactive":
            filters.append(Banner.is_active.is_(False))

        total = await self.db.scalar(select(func.count(Banner.id)).where(*filters)) or 0
        result = await self.db.execute(
            select(Banner)
            .where(*filters)
            .order_by(Banner.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        banners = [BannerResponse.model_validate(b).model_dump() for b in result.scalars().all()]

        pagination = paginate(total, page, limit)
        pagination["total_banners"] = total
        return {"banners": banners, "pagination": pagination}

    async def get_banner(self, banner_id: str) -> Banner:
        banner = await self.db.get(Banner, banner_id)
        if banner is None:
            raise NotFoundError("Banner not found")
        return banner

    async def _invalidate(self) -> None:
        if self.cache is not None:
            await self.cache.invalidate_patterns(*BANNER_CACHE_PATTERNS)

    async def _destroy_media(self, public_id: Optional[str]) -> None:
        if not public_id or self.media is None:
            return
        try:
            await run_in_threadpool(self.media.destroy, public_id)
        except UpstreamError as e:
            logger.warning(f"Failed to delete banner image {public_id}: {e.message}")

    async def _upload(self, banner: Banner, content: bytes, filename: str) -> None:
        stored = await run_in_threadpool(
            self.media.upload, content, BANNER_FOLDER, f"banner-{uuid7()}", filename
        )
        banner.image_url = stored.url
        banner.image_public_id = stored.public_id

    async def create_banner(
        self, data: BannerCreate, image: bytes, filename: str, admin: Admin
    ) -> Banner:
        banner = Banner(**data.model_dump(), created_by=admin.username)
        await self._upload(banner, image, filename)

        self.db.add(banner)
        await self.db.commit()
        await self.db.refresh(banner)
        await self._invalidate()

        logger.info(f"Banner {banner.id} created by {admin.username}")
        return banner

    async def update_banner(
        self,
        banner_id: str,
        data: BannerUpdate,
        image: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> Banner:
        banner = await self.get_banner(banner_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "alt_text" and not value:
                value = "Poster"
            setattr(banner, field, value)

        old_public_id = None
        if image is not None:
            old_public_id = banner.image_public_id
            await self._upload(banner, image, filename)

        await self.db.commit()
        await self.db.refresh(banner)
        await self._destroy_media(old_public_id)
        await self._invalidate()
        return banner

    async def delete_banner(self, banner_id: str) -> None:
        banner = await self.get_banner(banner_id)
        await self._destroy_media(banner.image_public_id)

        await self.db.delete(banner)
        await self.db.commit()
        await self._invalidate()
        logger.info(f"Banner {banner_id} deleted")
