from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class ContentStats(BaseModel):
    total_services: int
    published_services: int
    homepage_services: int
    total_banners: int
    active_banners: int


class AdminListItem(BaseModel):
    id: str
    name: str
    email: str
    username: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminDashboardResponse(BaseModel):
    total_admins: int
    content: ContentStats


class SuperAdminDashboardResponse(BaseModel):
    admins: List[AdminListItem]
    count: int
    total_admins: int
    content: ContentStats
