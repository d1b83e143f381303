from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin
from app.features.admin.schemas.auth import (
    AdminAuthResponse,
    AdminLoginRequest,
    AdminRegistrationRequest,
    AdminSummary,
)
from app.features.admin.services.auth import AdminAuthService
from app.features.admin.utils.auth import get_current_admin, get_optional_admin
from app.platform.cache.service import CacheService, get_cache
from app.platform.config import settings
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/auth", tags=["Admin - Authentication"])


def set_refresh_cookie(response: JSONResponse, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        path="/",
    )


def clear_refresh_cookie(response: JSONResponse) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register an admin (open for the first account, super admin only afterwards)",
)
async def register_admin(
    admin_data: AdminRegistrationRequest,
    current_admin: Optional[Admin] = Depends(get_optional_admin),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    auth_service = AdminAuthService(db, cache)
    admin = await auth_service.register_admin(admin_data, current_admin=current_admin)

    return api_response(
        data=auth_service.admin_to_response(admin),
        message="Admin registered successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.post(
    "/login",
    response_model=AdminAuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Login as admin",
)
async def login_admin(login_data: AdminLoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Authenticate an admin. The access token is returned in the body and the
    refresh token is set as an HttpOnly cookie.
    """
    auth_service = AdminAuthService(db)
    admin, access_token, refresh_token = await auth_service.login(login_data)

    response = api_response(
        data=AdminAuthResponse(
            user=AdminSummary(user_id=str(admin.id), username=admin.username, role=admin.role),
            access_token=access_token,
        ),
        message="Login successful",
    )
    set_refresh_cookie(response, refresh_token)
    return response


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    summary="Rotate the refresh cookie and issue a new access token",
)
async def refresh_access_token(request: Request, db: AsyncSession = Depends(get_db)):
    auth_service = AdminAuthService(db)
    presented = request.cookies.get(settings.REFRESH_COOKIE_NAME)

    admin, access_token, refresh_token = await auth_service.refresh_session(presented)

    response = api_response(
        data={"access_token": access_token, "token_type": "bearer"},
        message="Access token refreshed",
    )
    set_refresh_cookie(response, refresh_token)
    return response


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    summary="Logout admin",
)
async def logout_admin(
    current_admin: Admin = Depends(get_current_admin), db: AsyncSession = Depends(get_db)
):
    """Revoke the stored refresh token and clear the cookie."""
    auth_service = AdminAuthService(db)
    await auth_service.logout(str(current_admin.id))

    response = api_response(data={}, message="Logout successful")
    clear_refresh_cookie(response)
    return response


@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    summary="Get current admin profile",
)
async def get_current_admin_profile(current_admin: Admin = Depends(get_current_admin)):
    return api_response(
        data=AdminAuthService.admin_to_response(current_admin),
        message="Admin profile retrieved successfully",
    )
