import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.features.admin.models.admin import Admin
from app.features.admin.schemas.auth import AdminLoginRequest, AdminRegistrationRequest
from app.features.admin.services.auth import AdminAuthService
from app.features.admin.utils.admin_creator import create_super_admin_programmatically
from app.platform.cache.service import CacheService
from app.platform.exceptions import AuthError, ForbiddenError
from conftest import ADMIN, SUPER_ADMIN, FakeRedis


async def _bootstrap(db_session, cache=None) -> Admin:
    service = AdminAuthService(db_session, cache)
    return await service.register_admin(AdminRegistrationRequest(**SUPER_ADMIN))


@pytest.mark.asyncio
async def test_login_stores_issued_refresh_token(db_session):
    await _bootstrap(db_session)
    service = AdminAuthService(db_session)

    admin, access_token, refresh_token = await service.login(
        AdminLoginRequest(username="owner", password=SUPER_ADMIN["password"])
    )

    stored = await db_session.scalar(select(Admin.refresh_token).where(Admin.id == admin.id))
    assert stored == refresh_token
    assert access_token != refresh_token
    assert admin.last_login is not None
    assert admin.login_attempts == 0


@pytest.mark.asyncio
async def test_refresh_rejects_token_that_is_not_stored(db_session):
    await _bootstrap(db_session)
    service = AdminAuthService(db_session)
    _, _, first = await service.login(
        AdminLoginRequest(username="owner", password=SUPER_ADMIN["password"])
    )
    _, _, second = await service.login(
        AdminLoginRequest(username="owner", password=SUPER_ADMIN["password"])
    )

    # Logging in again replaced the stored token
    with pytest.raises(AuthError):
        await service.refresh_session(first)
    _, _, rotated = await service.refresh_session(second)
    assert rotated != second


@pytest.mark.asyncio
async def test_logout_clears_stored_token(db_session):
    admin = await _bootstrap(db_session)
    service = AdminAuthService(db_session)
    _, _, refresh_token = await service.login(
        AdminLoginRequest(username="owner", password=SUPER_ADMIN["password"])
    )

    await service.logout(admin.id)

    stored = await db_session.scalar(select(Admin.refresh_token).where(Admin.id == admin.id))
    assert stored is None
    with pytest.raises(AuthError):
        await service.refresh_session(refresh_token)


@pytest.mark.asyncio
async def test_refresh_for_deactivated_admin_is_forbidden(db_session):
    admin = await _bootstrap(db_session)
    service = AdminAuthService(db_session)
    _, _, refresh_token = await service.login(
        AdminLoginRequest(username="owner", password=SUPER_ADMIN["password"])
    )

    admin.is_active = False
    await db_session.commit()

    with pytest.raises(ForbiddenError):
        await service.refresh_session(refresh_token)


@pytest.mark.asyncio
async def test_inactive_admin_cannot_login(db_session):
    admin = await _bootstrap(db_session)
    admin.is_active = False
    await db_session.commit()

    with pytest.raises(AuthError) as exc:
        await AdminAuthService(db_session).login(
            AdminLoginRequest(username="owner", password=SUPER_ADMIN["password"])
        )
    assert exc.value.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_registration_invalidates_admin_dashboard_views(db_session):
    redis = FakeRedis()
    cache = CacheService(redis)
    await redis.set("dashboard:super:admins", "[]")
    await redis.set("dashboard:shared:totalAdmins", "0")
    await redis.set("dashboard:shared:stats", "{}")

    await _bootstrap(db_session, cache)

    assert list(redis.store) == ["dashboard:shared:stats"]


@pytest.mark.asyncio
async def test_register_requires_super_admin_after_bootstrap(db_session):
    owner = await _bootstrap(db_session)
    service = AdminAuthService(db_session)

    with pytest.raises(AuthError):
        await service.register_admin(AdminRegistrationRequest(**ADMIN))

    editor = await service.register_admin(AdminRegistrationRequest(**ADMIN), current_admin=owner)
    assert editor.role == "admin"
    assert editor.created_by == owner.id

    with pytest.raises(ForbiddenError):
        await service.register_admin(
            AdminRegistrationRequest(**{**ADMIN, "email": "x@example.com", "username": "xuser"}),
            current_admin=editor,
        )


@pytest.mark.asyncio
async def test_programmatic_super_admin_is_created_once(db_session):
    admin = await create_super_admin_programmatically(
        db_session, "Site Owner", "owner@example.com", "owner", "Str0ng!Pass"
    )
    assert admin.role == "super_admin"

    with pytest.raises(ValueError):
        await create_super_admin_programmatically(
            db_session, "Other Owner", "other@example.com", "other", "Str0ng!Pass"
        )


@pytest.mark.asyncio
async def test_concurrent_refresh_with_same_token(tmp_path):
    """Two sessions refreshing with one token: exactly one rotation wins."""
    from app.platform.db.session import Database

    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    await database.create_all()
    try:
        async with database.session_factory() as db:
            await AdminAuthService(db).register_admin(AdminRegistrationRequest(**SUPER_ADMIN))
            _, _, token = await AdminAuthService(db).login(
                AdminLoginRequest(username="owner", password=SUPER_ADMIN["password"])
            )

        async def attempt():
            async with database.session_factory() as db:
                return await AdminAuthService(db).refresh_session(token)

        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)
        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, AuthError)]
        assert len(successes) == 1
        assert len(failures) == 1
    finally:
        await database.dispose()


@pytest.mark.asyncio
async def test_concurrent_bootstrap_creates_one_super_admin(tmp_path):
    """Two anonymous registrations on an empty table: only one becomes super_admin."""
    from app.platform.db.session import Database

    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'bootstrap.db'}")
    await database.create_all()
    try:
        async def attempt(payload):
            async with database.session_factory() as db:
                return await AdminAuthService(db).register_admin(
                    AdminRegistrationRequest(**payload)
                )

        results = await asyncio.gather(
            attempt(SUPER_ADMIN), attempt(ADMIN), return_exceptions=True
        )
        successes = [r for r in results if isinstance(r, Admin)]
        failures = [r for r in results if isinstance(r, (ForbiddenError, AuthError))]
        assert len(successes) == 1
        assert len(failures) == 1

        async with database.session_factory() as db:
            roles = (await db.execute(select(Admin.role))).scalars().all()
        assert roles == ["super_admin"]
    finally:
        await database.dispose()


@pytest.mark.asyncio
async def test_store_rejects_second_super_admin(db_session):
    await _bootstrap(db_session)

    db_session.add(
        Admin(
            name="Other Owner",
            email="other@example.com",
            username="other",
            password_hash="x",
            role="super_admin",
        )
    )
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()
