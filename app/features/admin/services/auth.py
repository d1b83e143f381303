import secrets
from datetime import timedelta
from functools import lru_cache
from typing import Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin, AdminRole
from app.features.admin.schemas.auth import (
    AdminLoginRequest,
    AdminRegistrationRequest,
    AdminResponse,
)
from app.features.admin.utils.security import (
    hash_password,
    issue_access_token,
    issue_refresh_token,
    token_claims,
    verify_password,
    verify_refresh_token,
)
from app.platform.cache.keys import DASHBOARD_SHARED, DASHBOARD_SUPER, CacheKey
from app.platform.cache.service import CacheService
from app.platform.config import settings
from app.platform.db.base import utcnow
from app.platform.exceptions import AuthError, ConflictError, ForbiddenError
from app.platform.logger import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"

ADMIN_CACHE_PATTERNS = (
    CacheKey.family(DASHBOARD_SUPER, "admins"),
    CacheKey.family(DASHBOARD_SHARED, "totalAdmins"),
)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


class AdminAuthService:
    def __init__(self, db: AsyncSession, cache: Optional[CacheService] = None):
        self.db = db
        self.cache = cache

    # ── Lookups ──────────────────────────────────

    async def get_admin_by_id(self, admin_id: Optional[str]) -> Optional[Admin]:
        if not admin_id:
            return None
        return await self.db.get(Admin, admin_id)

    async def get_admin_by_identifier(self, identifier: str) -> Optional[Admin]:
        column = Admin.email if "@" in identifier else Admin.username
        result = await self.db.execute(select(Admin).where(column == identifier.lower()))
        return result.scalar_one_or_none()

    async def count_admins(self) -> int:
        return await self.db.scalar(select(func.count(Admin.id))) or 0

    async def _super_admin_exists(self) -> bool:
        query = select(Admin.id).where(Admin.role == AdminRole.super_admin.value)
        return (await self.db.scalar(query)) is not None

    # ── Registration ─────────────────────────────

    async def register_admin(
        self, admin_data: AdminRegistrationRequest, current_admin: Optional[Admin] = None
    ) -> Admin:
        """
        Create an admin account.

        With no admins on record registration is open and the new account
        becomes the super_admin. After that only the super_admin may register
        accounts, and they are always plain admins.
        """
        if await self.count_admins() == 0:
            role = AdminRole.super_admin
            created_by = None
            logger.info(f"Bootstrapping first super_admin {admin_data.username}")
        else:
            if current_admin is None:
                raise AuthError("Access token required", code="INVALID_TOKEN")
            if not current_admin.is_super_admin:
                raise ForbiddenError("SuperAdmin access required")
            if admin_data.role == AdminRole.super_admin:
                raise ForbiddenError(
                    "A super_admin already exists. Only one super_admin is allowed."
                )
            role = AdminRole.admin
            created_by = str(current_admin.id)

        result = await self.db.execute(
            select(Admin).where(
                or_(Admin.email == admin_data.email, Admin.username == admin_data.username)
            )
        )
        existing = result.scalars().first()
        if existing is not None:
            if existing.email == admin_data.email:
                raise ConflictError("Email already registered")
            raise ConflictError("Username already taken")

        admin = Admin(
            name=admin_data.name,
            email=admin_data.email,
            username=admin_data.username,
            password_hash=hash_password(admin_data.password),
            role=role.value,
            created_by=created_by,
            is_active=True,
            email_verified=False,
        )
        self.db.add(admin)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # A concurrent bootstrap claimed the super_admin slot first
            if role == AdminRole.super_admin and await self._super_admin_exists():
                logger.warning(f"Concurrent bootstrap rejected for {admin_data.username}")
                raise ForbiddenError(
                    "A super_admin already exists. Only one super_admin is allowed."
                ) from e
            raise ConflictError("Email or username already exists") from e
        await self.db.refresh(admin)

        if self.cache is not None:
            await self.cache.invalidate_patterns(*ADMIN_CACHE_PATTERNS)

        logger.info(f"Registered {role.value} {admin.username}")
        return admin

    # ── Login / refresh / logout ─────────────────

    async def _record_failed_login(self, admin: Admin) -> None:
        admin.login_attempts = (admin.login_attempts or 0) + 1
        if admin.login_attempts >= settings.MAX_LOGIN_ATTEMPTS:
            admin.lock_until = utcnow() + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
            admin.login_attempts = 0
            logger.warning(f"Admin {admin.username} locked until {admin.lock_until}")
        await self.db.commit()

    async def authenticate(self, identifier: str, password: str) -> Admin:
        admin = await self.get_admin_by_identifier(identifier)
        if admin is None:
            verify_password(password, _dummy_hash())
            raise AuthError(INVALID_CREDENTIALS)

        if admin.lock_until and admin.lock_until > utcnow():
            logger.info(f"Login rejected for locked admin {admin.username}")
            raise AuthError(INVALID_CREDENTIALS)

        if not verify_password(password, admin.password_hash):
            await self._record_failed_login(admin)
            raise AuthError(INVALID_CREDENTIALS)

        if not admin.is_active:
            logger.info(f"Login rejected for deactivated admin {admin.username}")
            raise AuthError(INVALID_CREDENTIALS)

        return admin

    async def login(self, login_data: AdminLoginRequest) -> Tuple[Admin, str, str]:
        admin = await self.authenticate(login_data.username, login_data.password)

        claims = token_claims(admin)
        access_token = issue_access_token(claims)
        refresh_token = issue_refresh_token(claims)

        admin.refresh_token = refresh_token
        admin.login_attempts = 0
        admin.lock_until = None
        admin.last_login = utcnow()
        await self.db.commit()

        logger.info(f"Login successful for {admin.username}")
        return admin, access_token, refresh_token

    async def refresh_session(self, presented_token: Optional[str]) -> Tuple[Admin, str, str]:
        """
        Exchange a refresh token for a new access token and rotate it.

        The presented token must equal the one stored on the admin. The swap
        is a conditional UPDATE, so when two requests race with the same
        token only the first one wins.
        """
        if not presented_token:
            raise AuthError("Refresh token not found", code="INVALID_TOKEN")

        payload = verify_refresh_token(presented_token)

        admin = await self.get_admin_by_id(payload.get("sub"))
        if admin is None:
            raise AuthError(INVALID_REFRESH_TOKEN, code="INVALID_TOKEN")
        if not admin.is_active:
            raise ForbiddenError("Account deactivated")
        if not admin.refresh_token or not secrets.compare_digest(
            admin.refresh_token, presented_token
        ):
            logger.warning(f"Refresh token mismatch for admin {admin.username}")
            raise AuthError(INVALID_REFRESH_TOKEN, code="INVALID_TOKEN")

        claims = token_claims(admin)
        new_refresh_token = issue_refresh_token(claims)
        result = await self.db.execute(
            update(Admin)
            .where(Admin.id == admin.id, Admin.refresh_token == presented_token)
            .values(refresh_token=new_refresh_token)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        if result.rowcount != 1:
            logger.warning(f"Refresh token for {admin.username} was rotated concurrently")
            raise AuthError(INVALID_REFRESH_TOKEN, code="INVALID_TOKEN")

        admin.refresh_token = new_refresh_token
        access_token = issue_access_token(claims)
        return admin, access_token, new_refresh_token

    async def logout(self, admin_id: str) -> None:
        await self.db.execute(
            update(Admin)
            .where(Admin.id == admin_id)
            .values(refresh_token=None)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        logger.info(f"Refresh token cleared for admin {admin_id}")

    @staticmethod
    def admin_to_response(admin: Admin) -> AdminResponse:
        return AdminResponse.model_validate(admin)
