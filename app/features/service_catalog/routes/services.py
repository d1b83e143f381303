from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin
from app.features.admin.utils.auth import require_admin
from app.features.service_catalog.schemas.service import (
    PublishToggleRequest,
    ReorderRequest,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from app.features.service_catalog.services.service_catalog import ServiceCatalogService
from app.platform.cache.keys import DASHBOARD_SHARED, SERVICE_PUBLIC, SERVICES_PUBLIC, CacheKey
from app.platform.cache.service import CacheService, get_cache
from app.platform.db.session import get_db
from app.platform.response import api_response
from app.platform.storage.media import MediaStorage, get_media_storage
from app.platform.utils.file_upload import read_image_upload
from app.platform.utils.forms import load_json_field, validate_form

router = APIRouter(prefix="/services", tags=["Services"])

PUBLIC_LIST_TTL = 30 * 60
PUBLIC_DETAIL_TTL = 15 * 60
ADMIN_LIST_TTL = 2 * 60


def _service_form(
    title: Optional[str],
    slug: Optional[str],
    subtitle: Optional[str],
    short_description: Optional[str],
    description: Optional[str],
    icon_name: Optional[str],
    research_types: Optional[str],
    is_published: Optional[str],
    show_on_homepage: Optional[str],
    display_order: Optional[str],
    seo: Optional[str],
) -> dict:
    return {
        "title": title,
        "slug": slug or None,
        "subtitle": subtitle,
        "short_description": short_description,
        "description": description,
        "icon_name": icon_name or None,
        "research_types": load_json_field(research_types, "research_types"),
        "is_published": is_published,
        "show_on_homepage": show_on_homepage,
        "display_order": display_order,
        "seo": load_json_field(seo, "seo"),
    }


# ── Public ───────────────────────────────────────


@router.get("/active", summary="List published services")
async def get_active_services(
    show_on_homepage: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    service = ServiceCatalogService(db)
    key = CacheKey(SERVICES_PUBLIC, "active", {"homepage": show_on_homepage})
    services = await cache.get_cached_data(
        key, PUBLIC_LIST_TTL, lambda: service.fetch_active_services(show_on_homepage)
    )
    return api_response(
        data={"services": services, "count": len(services)},
        message="Services retrieved successfully",
    )


@router.get("/slug/{slug}", summary="Get a published service by slug")
async def get_service_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    service = ServiceCatalogService(db)
    key = CacheKey(SERVICE_PUBLIC, "slug", {"slug": slug.lower()})
    data = await cache.get_cached_data(
        key, PUBLIC_DETAIL_TTL, lambda: service.fetch_service_by_slug(slug)
    )
    await service.record_view(data["id"])
    return api_response(data={"service": data}, message="Service retrieved successfully")


# ── Admin ────────────────────────────────────────


@router.get("", summary="List all services (admin)")
async def get_all_services(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[Literal["active", "inactive"]] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    show_on_homepage: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    admin: Admin = Depends(require_admin),
):
    service = ServiceCatalogService(db)
    key = CacheKey(
        DASHBOARD_SHARED,
        "services",
        {
            "page": page,
            "limit": limit,
            "status": status_filter,
            "search": (search or "").strip().lower(),
            "homepage": show_on_homepage,
        },
    )
    data = await cache.get_cached_data(
        key,
        ADMIN_LIST_TTL,
        lambda: service.fetch_all_services(page, limit, status_filter, search, show_on_homepage),
    )
    return api_response(data=data, message="Services retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a service")
async def create_service(
    title: Optional[str] = Form(None),
    slug: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    icon_name: Optional[str] = Form(None),
    research_types: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None),
    show_on_homepage: Optional[str] = Form(None),
    display_order: Optional[str] = Form(None),
    seo: Optional[str] = Form(None),
    hero_image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    media: MediaStorage = Depends(get_media_storage),
    admin: Admin = Depends(require_admin),
):
    """Multipart form; `research_types` and `seo` are JSON-encoded strings."""
    data = validate_form(
        ServiceCreate,
        _service_form(
            title, slug, subtitle, short_description, description, icon_name,
            research_types, is_published, show_on_homepage, display_order, seo,
        ),
    )
    content = await read_image_upload(hero_image, "hero_image")

    catalog = ServiceCatalogService(db, cache, media)
    service = await catalog.create_service(data, content, hero_image.filename, admin)
    return api_response(
        data={"service": ServiceResponse.model_validate(service)},
        message="Service created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/reorder", summary="Bulk update display order")
async def reorder_services(
    payload: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    admin: Admin = Depends(require_admin),
):
    catalog = ServiceCatalogService(db, cache)
    updated = await catalog.reorder_services(payload.order_data)
    return api_response(data={"updated": updated}, message="Services reordered successfully")


@router.put("/{service_id}", summary="Update a service")
async def update_service(
    service_id: str,
    title: Optional[str] = Form(None),
    slug: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    icon_name: Optional[str] = Form(None),
    research_types: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None),
    show_on_homepage: Optional[str] = Form(None),
    display_order: Optional[str] = Form(None),
    seo: Optional[str] = Form(None),
    hero_image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    media: MediaStorage = Depends(get_media_storage),
    admin: Admin = Depends(require_admin),
):
    data = validate_form(
        ServiceUpdate,
        _service_form(
            title, slug, subtitle, short_description, description, icon_name,
            research_types, is_published, show_on_homepage, display_order, seo,
        ),
    )
    content = await read_image_upload(hero_image, "hero_image", required=False)

    catalog = ServiceCatalogService(db, cache, media)
    service = await catalog.update_service(
        service_id,
        data,
        admin,
        image=content,
        filename=hero_image.filename if content is not None else None,
    )
    return api_response(
        data={"service": ServiceResponse.model_validate(service)},
        message="Service updated successfully",
    )


@router.delete("/{service_id}", summary="Delete a service")
async def delete_service(
    service_id: str,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    media: MediaStorage = Depends(get_media_storage),
    admin: Admin = Depends(require_admin),
):
    catalog = ServiceCatalogService(db, cache, media)
    await catalog.delete_service(service_id)
    return api_response(data={}, message="Service deleted successfully")


@router.patch("/{service_id}/publish", summary="Publish or unpublish a service")
async def toggle_publish(
    service_id: str,
    payload: PublishToggleRequest,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    media: MediaStorage = Depends(get_media_storage),
    admin: Admin = Depends(require_admin),
):
    catalog = ServiceCatalogService(db, cache, media)
    service = await catalog.toggle_publish(service_id, payload.is_published, admin)
    state = "published" if service.is_published else "unpublished"
    return api_response(
        data={"service": ServiceResponse.model_validate(service)},
        message=f"Service {state} successfully",
    )
