from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.features.service_catalog.utils.slug import SLUG_PATTERN, slugify
from app.platform.utils.sanitize import sanitize_text, sanitize_value

IconName = Literal["BarChart3", "Smartphone", "TrendingUp", "Monitor", "Grid3x3", "GraduationCap"]

_TEXT_FIELDS = ("title", "subtitle", "short_description", "description")


def _clean(v):
    return sanitize_text(v) if isinstance(v, str) else v


def _check_slug(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if not SLUG_PATTERN.match(v):
        raise ValueError("Slug can only contain lowercase letters, numbers, and hyphens")
    return v


class SeoData(BaseModel):
    meta_title: Optional[str] = Field(None, max_length=70)
    meta_description: Optional[str] = Field(None, max_length=160)
    meta_keywords: List[str] = Field(default_factory=list, max_length=15)

    @field_validator("meta_title", "meta_description", "meta_keywords", mode="before")
    @classmethod
    def clean(cls, v):
        return sanitize_value(v)


class ServiceCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    subtitle: Optional[str] = Field(None, max_length=250)
    short_description: str = Field(..., min_length=50, max_length=350)
    description: str = Field(..., min_length=50)
    icon_name: IconName = "BarChart3"
    research_types: List[str] = Field(default_factory=list, max_length=10)
    is_published: bool = False
    show_on_homepage: bool = True
    display_order: int = Field(0, ge=0)
    seo: Optional[SeoData] = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def clean_text(cls, v):
        return _clean(v)

    @field_validator("research_types", mode="before")
    @classmethod
    def clean_research_types(cls, v):
        if isinstance(v, list):
            return [item for item in sanitize_value(v) if item]
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        return _check_slug(v)

    @model_validator(mode="after")
    def fill_defaults(self):
        if not self.slug:
            self.slug = slugify(self.title)
            if not self.slug:
                raise ValueError("Title must contain letters or numbers to derive a slug")
        seo = self.seo or SeoData()
        if not seo.meta_title:
            seo.meta_title = self.title[:70]
        if not seo.meta_description:
            seo.meta_description = self.short_description[:160]
        self.seo = seo
        return self


class ServiceUpdate(BaseModel):
    """Partial update; only fields the client sent are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    subtitle: Optional[str] = Field(None, max_length=250)
    short_description: Optional[str] = Field(None, min_length=50, max_length=350)
    description: Optional[str] = Field(None, min_length=50)
    icon_name: Optional[IconName] = None
    research_types: Optional[List[str]] = Field(None, max_length=10)
    is_published: Optional[bool] = None
    show_on_homepage: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)
    seo: Optional[SeoData] = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def clean_text(cls, v):
        return _clean(v)

    @field_validator("research_types", mode="before")
    @classmethod
    def clean_research_types(cls, v):
        if isinstance(v, list):
            return [item for item in sanitize_value(v) if item]
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        return _check_slug(v)


class HeroImage(BaseModel):
    url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    size: Optional[int] = None


class ServiceResponse(BaseModel):
    id: str
    title: str
    slug: str
    subtitle: Optional[str] = None
    short_description: str
    description: str
    icon_name: str
    hero_image: HeroImage
    research_types: List[str] = []
    is_published: bool
    show_on_homepage: bool
    display_order: int
    seo: dict = {}
    view_count: int = 0
    last_viewed_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    full_title: str
    full_description: str
    is_active: bool

    class Config:
        from_attributes = True


class ServiceCard(BaseModel):
    """Fields the public site needs for list views."""

    id: str
    title: str
    slug: str
    subtitle: Optional[str] = None
    short_description: str
    icon_name: str
    hero_image: HeroImage
    research_types: List[str] = []
    show_on_homepage: bool
    display_order: int

    class Config:
        from_attributes = True


class PublishToggleRequest(BaseModel):
    is_published: bool


class ReorderItem(BaseModel):
    service_id: str = Field(..., min_length=1)
    display_order: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    order_data: List[ReorderItem] = Field(..., min_length=1)
