from sqlalchemy import Boolean, Column, String

from app.platform.db.base import BaseModel


class Banner(BaseModel):
    """Call-to-action poster shown on the public site."""

    __tablename__ = "banners"

    image_url = Column(String, nullable=False)
    image_public_id = Column(String, nullable=False)
    link = Column(String(500), nullable=True)
    alt_text = Column(String(200), default="Poster", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_by = Column(String, nullable=False)

    def __repr__(self):
        return f"<Banner(id={self.id}, active={self.is_active})>"
