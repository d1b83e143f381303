from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text

from app.platform.db.base import BaseModel

DEFAULT_ICON = "BarChart3"


class Service(BaseModel):
    """A catalog entry shown on the public site once published."""

    __tablename__ = "services"

    title = Column(String(100), nullable=False, index=True)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    subtitle = Column(String(250), nullable=True)
    short_description = Column(String(350), nullable=False)
    description = Column(Text, nullable=False)
    icon_name = Column(String(32), default=DEFAULT_ICON, nullable=False)

    hero_image_url = Column(String, nullable=False)
    hero_image_public_id = Column(String, nullable=False)
    hero_image_width = Column(Integer, nullable=True)
    hero_image_height = Column(Integer, nullable=True)
    hero_image_format = Column(String(16), default="webp", nullable=True)
    hero_image_size = Column(Integer, nullable=True)

    research_types = Column(JSON, default=list, nullable=False)

    is_published = Column(Boolean, default=False, nullable=False, index=True)
    show_on_homepage = Column(Boolean, default=True, nullable=False, index=True)
    display_order = Column(Integer, default=0, nullable=False, index=True)

    # {"meta_title": str, "meta_description": str, "meta_keywords": [str]}
    seo = Column(JSON, default=dict, nullable=False)

    view_count = Column(Integer, default=0, nullable=False)
    last_viewed_at = Column(DateTime, nullable=True)

    created_by = Column(String, nullable=False)
    updated_by = Column(String, nullable=True)

    __table_args__ = (
        Index("ix_services_homepage", "is_published", "show_on_homepage", "display_order"),
    )

    @property
    def hero_image(self) -> dict:
        return {
            "url": self.hero_image_url,
            "public_id": self.hero_image_public_id,
            "width": self.hero_image_width,
            "height": self.hero_image_height,
            "format": self.hero_image_format,
            "size": self.hero_image_size,
        }

    @property
    def full_title(self) -> str:
        return (self.seo or {}).get("meta_title") or self.title

    @property
    def full_description(self) -> str:
        return (self.seo or {}).get("meta_description") or self.short_description

    @property
    def is_active(self) -> bool:
        return bool(self.is_published and self.hero_image_url)

    def __repr__(self):
        return f"<Service(id={self.id}, slug={self.slug}, published={self.is_published})>"
