# Importing the models registers their tables on Base.metadata.
from app.platform.db.base import Base  # noqa: F401
from app.features.admin.models.admin import Admin  # noqa: F401
from app.features.banners.models.banner import Banner  # noqa: F401
from app.features.service_catalog.models.service import Service  # noqa: F401
