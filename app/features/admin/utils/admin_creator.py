from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin.models.admin import Admin, AdminRole
from app.features.admin.schemas.auth import AdminRegistrationRequest
from app.features.admin.services.auth import AdminAuthService
from app.features.admin.utils.security import hash_password


async def super_admin_exists(db: AsyncSession) -> bool:
    count = await db.scalar(
        select(func.count(Admin.id)).where(Admin.role == AdminRole.super_admin.value)
    )
    return bool(count)


async def create_super_admin_programmatically(
    db: AsyncSession, name: str, email: str, username: str, password: str
) -> Admin:
    """
    Create the super admin outside the HTTP flow, for initial setup.

    Input goes through the same validation as the register endpoint. Only one
    super admin may exist.

    Raises:
        ValueError: when a super admin, or an admin with the same email or
            username, already exists
        pydantic.ValidationError: when the credentials fail validation
    """
    if await super_admin_exists(db):
        raise ValueError("A super_admin already exists. Only one super_admin is allowed.")

    data = AdminRegistrationRequest(name=name, email=email, username=username, password=password)

    auth_service = AdminAuthService(db)
    if await auth_service.get_admin_by_identifier(data.email):
        raise ValueError(f"Admin with email {data.email} already exists")
    if await auth_service.get_admin_by_identifier(data.username):
        raise ValueError(f"Admin with username {data.username} already exists")

    admin = Admin(
        name=data.name,
        email=data.email,
        username=data.username,
        password_hash=hash_password(data.password),
        role=AdminRole.super_admin.value,
        is_active=True,
        created_by=None,
    )
    db.add(admin)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ValueError(
            "A super_admin, or an admin with this email or username, already exists"
        ) from e
    await db.refresh(admin)
    return admin
