from pathlib import Path
from typing import List, Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "PB Group Content API"
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    DEBUG: bool = False
    PORT: int = 9000
    API_PREFIX: str = "/api"

    # ── Database ────────────────────────────────
    DATABASE_URL: str
    DB_CONNECT_RETRIES: int = 5
    # Create missing tables at startup (local runs and tests; use alembic otherwise)
    DB_AUTO_CREATE: bool = False

    # ── Cache ───────────────────────────────────
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = 5.0

    # ── JWT / Auth ──────────────────────────────
    JWT_ACCESS_SECRET: str
    JWT_REFRESH_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    REFRESH_COOKIE_NAME: str = "refreshToken"

    MAX_LOGIN_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15

    # ── CORS ────────────────────────────────────
    FRONTEND_URL: str = ""
    CORS_ORIGINS: List[str] = []
    DEV_CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # ── Media ───────────────────────────────────
    MEDIA_ROOT: str = "static/uploads"
    MEDIA_URL_PREFIX: str = "/static/uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024

    # ── Rate limiting ───────────────────────────
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    FORCE_IN_MEMORY_RATE_LIMITER: bool = False
    WHITELIST_IPS: List[str] = []

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @model_validator(mode="after")
    def check_distinct_secrets(self) -> "Settings":
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins(self) -> List[str]:
        origins = [o for o in [self.FRONTEND_URL, *self.CORS_ORIGINS] if o]
        if self.ENVIRONMENT == "development":
            origins.extend(self.DEV_CORS_ORIGINS)
        # preserve order, drop duplicates
        return list(dict.fromkeys(origins))


settings = Settings()
