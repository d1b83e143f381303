from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.platform.utils.sanitize import sanitize_text


class BannerCreate(BaseModel):
    link: Optional[str] = Field(None, max_length=500)
    alt_text: str = Field("Poster", max_length=200)
    is_active: bool = True

    @field_validator("link", "alt_text", mode="before")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v) if isinstance(v, str) else v

    @field_validator("link")
    @classmethod
    def validate_link(cls, v):
        if v and not v.startswith(("http://", "https://", "/")):
            raise ValueError("Link must be an absolute URL or a site path")
        return v or None

    @field_validator("alt_text")
    @classmethod
    def default_alt_text(cls, v):
        return v or "Poster"


class BannerUpdate(BaseModel):
    link: Optional[str] = Field(None, max_length=500)
    alt_text: Optional[str] = Field(None, max_length=200)
    is_active: Optional[bool] = None

    @field_validator("link", "alt_text", mode="before")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v) if isinstance(v, str) else v

    @field_validator("link")
    @classmethod
    def validate_link(cls, v):
        if v and not v.startswith(("http://", "https://", "/")):
            raise ValueError("Link must be an absolute URL or a site path")
        return v or None


class BannerResponse(BaseModel):
    id: str
    image_url: str
    image_public_id: str
    link: Optional[str] = None
    alt_text: str
    is_active: bool
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActiveBanner(BaseModel):
    image_url: str
    link: Optional[str] = None
    alt_text: str

    class Config:
        from_attributes = True
