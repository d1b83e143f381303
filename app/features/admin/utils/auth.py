from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin, AdminRole
from app.features.admin.utils.security import verify_access_token
from app.platform.db.session import get_db
from app.platform.exceptions import AuthError, ForbiddenError, TokenExpiredError

security = HTTPBearer(auto_error=False)


async def _resolve_admin(token: str, db: AsyncSession) -> Admin:
    try:
        payload = verify_access_token(token)
    except TokenExpiredError:
        raise TokenExpiredError("Invalid or expired access token")
    except AuthError:
        raise AuthError("Invalid or expired access token", code="INVALID_TOKEN")

    admin_id = payload.get("sub")
    admin = await db.get(Admin, admin_id) if admin_id else None
    if admin is None:
        raise AuthError("User not found", code="INVALID_TOKEN")
    if not admin.is_active:
        raise ForbiddenError("Account deactivated")
    return admin


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required", code="INVALID_TOKEN")
    return await _resolve_admin(credentials.credentials, db)


async def get_optional_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[Admin]:
    """Like get_current_admin, but an absent Authorization header yields None."""
    if credentials is None or not credentials.credentials:
        return None
    return await _resolve_admin(credentials.credentials, db)


async def require_admin(current_admin: Admin = Depends(get_current_admin)) -> Admin:
    if current_admin.role not in (AdminRole.admin.value, AdminRole.super_admin.value):
        raise ForbiddenError("Admin access required")
    return current_admin


async def require_super_admin(current_admin: Admin = Depends(get_current_admin)) -> Admin:
    if not current_admin.is_super_admin:
        raise ForbiddenError("SuperAdmin access required")
    return current_admin
