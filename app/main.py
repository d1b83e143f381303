from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.middlewares.rate_limit import RateLimitMiddleware
from app.middlewares.request_logging import RequestLoggingMiddleware
from app.middlewares.security_headers import SecurityHeadersMiddleware
from app.platform.cache.redis import close_redis, create_redis_client, ping_redis
from app.platform.cache.service import CacheService
from app.platform.config import settings
from app.platform.db.session import Database
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import get_logger
from app.platform.storage.media import LocalMediaStorage

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

    db = Database(settings.DATABASE_URL, echo=settings.DEBUG)
    await db.connect(retries=settings.DB_CONNECT_RETRIES)
    if settings.DB_AUTO_CREATE:
        await db.create_all()

    redis = create_redis_client(settings.REDIS_URL, settings.REDIS_SOCKET_TIMEOUT)
    await ping_redis(redis)

    app.state.db = db
    app.state.redis = redis
    app.state.cache = CacheService(redis)
    app.state.media = LocalMediaStorage(settings.MEDIA_ROOT, settings.MEDIA_URL_PREFIX)

    try:
        yield
    finally:
        logger.info("Shutting down")
        await close_redis(redis)
        await db.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Admin and public content API for the company website",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    @app.get("/", tags=["Info"])
    def root():
        return {
            "app_name": settings.APP_NAME,
            "version": "1.0.0",
            "docs_url": "/docs",
            "api_base": settings.API_PREFIX,
        }

    add_exception_handlers(app)

    # Starlette runs the last added middleware first
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    if settings.ENVIRONMENT == "development":
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Uploaded media is served from here
    Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
    app.mount(settings.MEDIA_URL_PREFIX, StaticFiles(directory=settings.MEDIA_ROOT), name="media")

    app.include_router(health_router)
    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()
