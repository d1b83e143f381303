from fastapi import APIRouter, Request, status
from sqlalchemy import text

from app.platform.config import settings
from app.platform.db.base import utcnow
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(request: Request):
    """Liveness plus a probe of the database and the cache."""
    database = "up"
    try:
        async with request.app.state.db.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check: database unreachable: {e}")
        database = "down"

    cache = "down"
    redis = getattr(request.app.state, "redis", None)
    if redis is not None:
        try:
            await redis.ping()
            cache = "up"
        except Exception as e:
            logger.warning(f"Health check: cache unreachable: {e}")

    healthy = database == "up"
    return api_response(
        data={
            "status": "OK" if healthy else "DEGRADED",
            "timestamp": utcnow().isoformat() + "Z",
            "environment": settings.ENVIRONMENT,
            "database": database,
            "cache": cache,
        },
        message="Service is healthy" if healthy else "Service is degraded",
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
