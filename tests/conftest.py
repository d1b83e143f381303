"""
Test configuration and fixtures for the content API.

Every test that uses `client` gets its own SQLite database file and its own
in-memory Redis double, so registration always starts from an empty admins
table and no cached view leaks from one test into the next.
"""

import fnmatch
import os
import tempfile
import time
from typing import Generator

import pytest
from fastapi.testclient import TestClient

_tmp_root = tempfile.mkdtemp(prefix="content_api_tests_")

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_root, 'default.db')}"
os.environ["DB_AUTO_CREATE"] = "true"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret-6f1d0c2b9a8e7d6c5b4a39281706f5e4"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-0a1b2c3d4e5f60718293a4b5c6d7e8f9"
os.environ["MEDIA_ROOT"] = os.path.join(_tmp_root, "uploads")
os.environ["LOG_DIR"] = os.path.join(_tmp_root, "logs")
os.environ["FORCE_IN_MEMORY_RATE_LIMITER"] = "true"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "100000"


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis covering the calls the app makes."""

    def __init__(self):
        self.store = {}
        self.expiry = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("redis unavailable")

    def _alive(self, key):
        expires_at = self.expiry.get(key)
        if expires_at is not None and expires_at <= time.monotonic():
            self.store.pop(key, None)
            self.expiry.pop(key, None)
        return key in self.store

    async def ping(self):
        self._check()
        return True

    async def get(self, key):
        self._check()
        return self.store.get(key) if self._alive(key) else None

    async def set(self, key, value, ex=None):
        self._check()
        self.store[key] = value
        if ex:
            self.expiry[key] = time.monotonic() + ex
        else:
            self.expiry.pop(key, None)
        return True

    async def delete(self, *keys):
        self._check()
        deleted = 0
        for key in keys:
            if self._alive(key):
                del self.store[key]
                self.expiry.pop(key, None)
                deleted += 1
        return deleted

    async def scan_iter(self, match=None, count=None):
        self._check()
        for key in [k for k in list(self.store) if self._alive(k)]:
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def incr(self, key):
        self._check()
        value = int(self.store.get(key, 0)) + 1 if self._alive(key) else 1
        self.store[key] = str(value)
        return value

    async def expire(self, key, seconds):
        self._check()
        if not self._alive(key):
            return False
        self.expiry[key] = time.monotonic() + seconds
        return True

    async def ttl(self, key):
        self._check()
        if not self._alive(key):
            return -2
        expires_at = self.expiry.get(key)
        return -1 if expires_at is None else int(expires_at - time.monotonic())

    async def aclose(self):
        return None


SUPER_ADMIN = {
    "name": "Site Owner",
    "email": "owner@example.com",
    "username": "owner",
    "password": "Str0ng!Pass",
}

ADMIN = {
    "name": "Content Editor",
    "email": "editor@example.com",
    "username": "editor",
    "password": "Ed1tor!Pass",
}


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app, fake_redis, tmp_path, monkeypatch) -> Generator[TestClient, None, None]:
    """
    Test client running the real lifespan against a fresh SQLite file.

    The Redis client factory is patched so the lifespan wires `fake_redis`
    into `app.state`.
    """
    from app.platform.config import settings

    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr("app.main.create_redis_client", lambda *args, **kwargs: fake_redis)

    with TestClient(test_app) as test_client:
        yield test_client


def login(client: TestClient, username: str, password: str):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def bearer(response) -> dict:
    return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}


@pytest.fixture
def super_admin(client) -> dict:
    """Bootstrap the first account, which becomes the super admin."""
    response = client.post("/api/auth/register", json=SUPER_ADMIN)
    assert response.status_code == 201, response.text
    return SUPER_ADMIN


@pytest.fixture
def super_admin_headers(client, super_admin) -> dict:
    response = login(client, super_admin["username"], super_admin["password"])
    assert response.status_code == 200, response.text
    return bearer(response)


@pytest.fixture
def admin_headers(client, super_admin_headers) -> dict:
    response = client.post("/api/auth/register", json=ADMIN, headers=super_admin_headers)
    assert response.status_code == 201, response.text
    response = login(client, ADMIN["username"], ADMIN["password"])
    assert response.status_code == 200, response.text
    return bearer(response)


@pytest.fixture
async def db_session(tmp_path):
    """AsyncSession on a throwaway SQLite database, for service-level tests."""
    from app.platform.db.session import Database

    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'unit.db'}")
    await database.create_all()
    async with database.session_factory() as session:
        yield session
    await database.dispose()
