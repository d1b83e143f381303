from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import case, desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extension import uuid7

from app.features.admin.models.admin import Admin
from app.features.service_catalog.models.service import Service
from app.features.service_catalog.schemas.service import (
    ReorderItem,
    ServiceCard,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from app.features.service_catalog.utils.slug import slugify
from app.platform.cache.keys import DASHBOARD_SHARED, SERVICE_PUBLIC, SERVICES_PUBLIC, CacheKey
from app.platform.cache.service import CacheService
from app.platform.db.base import utcnow
from app.platform.exceptions import ConflictError, NotFoundError, UpstreamError
from app.platform.logger import get_logger
from app.platform.response import paginate
from app.platform.storage.media import MediaStorage

logger = get_logger(__name__)

ACTIVE_FOLDER = "services/active"
INACTIVE_FOLDER = "services/inactive"

SERVICE_CACHE_PATTERNS = (
    CacheKey.family(DASHBOARD_SHARED, "services"),
    CacheKey.family(SERVICES_PUBLIC, "active"),
    CacheKey.family(SERVICE_PUBLIC, "slug"),
    CacheKey.family(DASHBOARD_SHARED, "stats"),
)


def media_folder(is_published: bool) -> str:
    return ACTIVE_FOLDER if is_published else INACTIVE_FOLDER


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ServiceCatalogService:
    """Reads and writes for the services catalog; every write clears the cached views."""

    def __init__(
        self,
        db: AsyncSession,
        cache: Optional[CacheService] = None,
        media: Optional[MediaStorage] = None,
    ):
        self.db = db
        self.cache = cache
        self.media = media

    # ── Reads ────────────────────────────────────

    async def fetch_active_services(self, show_on_homepage: Optional[bool] = None) -> List[dict]:
        query = select(Service).where(Service.is_published.is_(True))
        if show_on_homepage is not None:
            query = query.where(Service.show_on_homepage.is_(show_on_homepage))
        query = query.order_by(Service.display_order.asc(), Service.created_at.desc())

        result = await self.db.execute(query)
        return [ServiceCard.model_validate(s).model_dump() for s in result.scalars().all()]

    async def fetch_service_by_slug(self, slug: str) -> dict:
        result = await self.db.execute(
            select(Service).where(Service.slug == slug.lower(), Service.is_published.is_(True))
        )
        service = result.scalar_one_or_none()
        if service is None:
            raise NotFoundError("Service not found")
        return ServiceResponse.model_validate(service).model_dump()

    async def record_view(self, service_id: str) -> None:
        """Bump the view counter; a failure here never fails the read."""
        try:
            await self.db.execute(
                update(Service)
                .where(Service.id == service_id)
                .values(view_count=Service.view_count + 1, last_viewed_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.warning(f"Failed to record view for service {service_id}: {e}")

    async def fetch_all_services(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
        show_on_homepage: Optional[bool] = None,
    ) -> dict:
        filters = []
        if status == "active":
            filters.append(Service.is_published.is_(True))
        elif status == "inactive":
            filters.append(Service.is_published.is_(False))
        if show_on_homepage is not None:
            filters.append(Service.show_on_homepage.is_(show_on_homepage))

        order_by = [Service.display_order.asc(), Service.created_at.desc()]
        if search:
            pattern = f"%{escape_like(search.strip())}%"
            filters.append(
                or_(
                    Service.title.ilike(pattern, escape="\\"),
                    Service.short_description.ilike(pattern, escape="\\"),
                    Service.description.ilike(pattern, escape="\\"),
                )
            )
            # title > short description > description
            rank = (
                case((Service.title.ilike(pattern, escape="\\"), 10), else_=0)
                + case((Service.short_description.ilike(pattern, escape="\\"), 5), else_=0)
                + case((Service.description.ilike(pattern, escape="\\"), 1), else_=0)
            )
            order_by.insert(0, desc(rank))

        total = await self.db.scalar(select(func.count(Service.id)).where(*filters)) or 0

        result = await self.db.execute(
            select(Service)
            .where(*filters)
            .order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        services = [ServiceResponse.model_validate(s).model_dump() for s in result.scalars().all()]

        pagination = paginate(total, page, limit)
        pagination["total_services"] = total
        return {"services": services, "pagination": pagination}

    async def get_service(self, service_id: str) -> Service:
        service = await self.db.get(Service, service_id)
        if service is None:
            raise NotFoundError("Service not found")
        return service

    async def _slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = select(Service.id).where(Service.slug == slug)
        if exclude_id:
            query = query.where(Service.id != exclude_id)
        return (await self.db.scalar(query)) is not None

    # ── Writes ───────────────────────────────────

    async def _invalidate(self) -> None:
        if self.cache is not None:
            await self.cache.invalidate_patterns(*SERVICE_CACHE_PATTERNS)

    async def _destroy_media(self, public_id: Optional[str]) -> None:
        if not public_id or self.media is None:
            return
        try:
            await run_in_threadpool(self.media.destroy, public_id)
        except UpstreamError as e:
            logger.warning(f"Failed to delete service image {public_id}: {e.message}")

    async def _move_media(self, service: Service) -> None:
        if self.media is None or not service.hero_image_public_id:
            return
        try:
            public_id, url = await run_in_threadpool(
                self.media.move,
                service.hero_image_public_id,
                media_folder(service.is_published),
                service.slug,
            )
        except UpstreamError as e:
            logger.warning(f"Failed to move image for service {service.slug}: {e.message}")
            return
        service.hero_image_public_id = public_id
        service.hero_image_url = url

    async def _upload_hero(
        self, service: Service, content: bytes, filename: str, name: Optional[str] = None
    ) -> None:
        stored = await run_in_threadpool(
            self.media.upload,
            content,
            media_folder(service.is_published),
            name or service.slug,
            filename,
        )
        service.hero_image_url = stored.url
        service.hero_image_public_id = stored.public_id
        service.hero_image_width = stored.width
        service.hero_image_height = stored.height
        service.hero_image_format = stored.format
        service.hero_image_size = stored.size

    async def create_service(
        self, data: ServiceCreate, image: bytes, filename: str, admin: Admin
    ) -> Service:
        if await self._slug_taken(data.slug):
            raise ConflictError("A service with this slug already exists")

        values = data.model_dump(exclude={"seo"})
        service = Service(**values, seo=data.seo.model_dump(), created_by=admin.username)
        await self._upload_hero(service, image, filename)

        self.db.add(service)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            await self._destroy_media(service.hero_image_public_id)
            raise ConflictError("A service with this slug already exists") from e
        await self.db.refresh(service)
        await self._invalidate()

        logger.info(f"Service {service.slug} created by {admin.username}")
        return service

    async def update_service(
        self,
        service_id: str,
        data: ServiceUpdate,
        admin: Admin,
        image: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> Service:
        service = await self.get_service(service_id)
        changes = data.model_dump(exclude_unset=True, exclude={"seo"})

        # A new title re-derives the slug unless one is given explicitly
        if changes.get("title") and not changes.get("slug"):
            derived = slugify(changes["title"])
            if derived:
                changes["slug"] = derived

        if changes.get("slug") and changes["slug"] != service.slug:
            if await self._slug_taken(changes["slug"], exclude_id=service.id):
                raise ConflictError("A service with this slug already exists")

        was_published = service.is_published
        for field, value in changes.items():
            setattr(service, field, value)

        if data.seo is not None:
            merged = dict(service.seo or {})
            merged.update(data.seo.model_dump(exclude_unset=True))
            service.seo = merged

        old_public_id = None
        if image is not None:
            old_public_id = service.hero_image_public_id
            # Fresh public id; the old asset is removed only once the commit lands
            version = str(uuid7())[-8:]
            await self._upload_hero(service, image, filename, name=f"{service.slug}-{version}")
        elif service.is_published != was_published:
            await self._move_media(service)
        new_public_id = service.hero_image_public_id

        service.updated_by = admin.username
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if old_public_id is not None:
                await self._destroy_media(new_public_id)
            raise ConflictError("A service with this slug already exists") from e
        await self.db.refresh(service)

        if old_public_id and old_public_id != new_public_id:
            await self._destroy_media(old_public_id)
        await self._invalidate()

        logger.info(f"Service {service.slug} updated by {admin.username}")
        return service

    async def delete_service(self, service_id: str) -> None:
        service = await self.get_service(service_id)
        await self._destroy_media(service.hero_image_public_id)

        await self.db.delete(service)
        await self.db.commit()
        await self._invalidate()
        logger.info(f"Service {service_id} deleted")

    async def toggle_publish(self, service_id: str, is_published: bool, admin: Admin) -> Service:
        service = await self.get_service(service_id)
        if service.is_published != is_published:
            service.is_published = is_published
            await self._move_media(service)
        service.updated_by = admin.username

        await self.db.commit()
        await self.db.refresh(service)
        await self._invalidate()
        return service

    async def reorder_services(self, order_data: List[ReorderItem]) -> int:
        ids = [item.service_id for item in order_data]
        result = await self.db.execute(select(Service.id).where(Service.id.in_(ids)))
        found = set(result.scalars().all())
        missing = [service_id for service_id in ids if service_id not in found]
        if missing:
            raise NotFoundError(f"Services not found: {', '.join(missing)}")

        for item in order_data:
            await self.db.execute(
                update(Service)
                .where(Service.id == item.service_id)
                .values(display_order=item.display_order, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
        await self.db.commit()
        await self._invalidate()
        return len(order_data)
