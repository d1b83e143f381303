from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin
from app.features.admin.utils.auth import require_admin
from app.features.banners.schemas.banner import BannerCreate, BannerResponse, BannerUpdate
from app.features.banners.services.banner import BannerService
from app.platform.cache.keys import BANNER_PUBLIC, DASHBOARD_SHARED, CacheKey
from app.platform.cache.service import CacheService, get_cache
from app.platform.db.session import get_db
from app.platform.response import api_response
from app.platform.storage.media import MediaStorage, get_media_storage
from app.platform.utils.file_upload import read_image_upload
from app.platform.utils.forms import validate_form

router = APIRouter(prefix="/banners", tags=["Banners"])

ACTIVE_BANNER_TTL = 30 * 60
ADMIN_LIST_TTL = 5 * 60


@router.get("/active", summary="Get the banner currently shown on the site")
async def get_active_banner(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    service = BannerService(db)
    banner = await cache.get_cached_data(
        CacheKey(BANNER_PUBLIC, "active", {"scope": "public"}),
        ACTIVE_BANNER_TTL,
        service.fetch_active_banner,
    )
    message = "Active banner retrieved successfully" if banner else "No active banner"
    return api_response(data={"banner": banner}, message=message)


@router.get("", summary="List banners (admin)")
async def get_all_banners(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[Literal["active", "inactive"]] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    admin: Admin = Depends(require_admin),
):
    service = BannerService(db)
    key = CacheKey(DASHBOARD_SHARED, "banners", {"page": page, "limit": limit, "status": status_filter})
    data = await cache.get_cached_data(
        key, ADMIN_LIST_TTL, lambda: service.fetch_all_banners(page, limit, status_filter)
    )
    return api_response(data=data, message="Banners retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED, summary="Upload a banner")
async def create_banner(
    image: Optional[UploadFile] = File(None),
    link: Optional[str] = Form(None),
    alt_text: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    media: MediaStorage = Depends(get_media_storage),
    admin: Admin = Depends(require_admin),
):
    data = validate_form(BannerCreate, {"link": link, "alt_text": alt_text, "is_active": is_active})
    content = await read_image_upload(image, "image")

    service = BannerService(db, cache, media)
    banner = await service.create_banner(data, content, image.filename, admin)
    return api_response(
        data={"banner": BannerResponse.model_validate(banner)},
        message="Banner created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{banner_id}", summary="Update a banner")
async def update_banner(
    banner_id: str,
    image: Optional[UploadFile] = File(None),
    link: Optional[str] = Form(None),
    alt_text: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    media: MediaStorage = Depends(get_media_storage),
    admin: Admin = Depends(require_admin),
):
    data = validate_form(BannerUpdate, {"link": link, "alt_text": alt_text, "is_active": is_active})
    content = await read_image_upload(image, "image", required=False)

    service = BannerService(db, cache, media)
    banner = await service.update_banner(
        banner_id, data, image=content, filename=image.filename if content is not None else None
    )
    return api_response(
        data={"banner": BannerResponse.model_validate(banner)},
        message="Banner updated successfully",
    )


@router.delete("/{banner_id}", summary="Delete a banner")
async def delete_banner(
    banner_id: str,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    media: MediaStorage = Depends(get_media_storage),
    admin: Admin = Depends(require_admin),
):
    service = BannerService(db, cache, media)
    await service.delete_banner(banner_id)
    return api_response(data={}, message="Banner deleted successfully")
