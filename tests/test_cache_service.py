import json

import pytest
from unittest.mock import AsyncMock

from app.platform.cache.keys import DASHBOARD_SHARED, CacheKey
from app.platform.cache.service import CacheService
from conftest import FakeRedis


def test_cache_key_sorts_filters_and_renders_missing_values():
    key = CacheKey(DASHBOARD_SHARED, "services", {"page": 2, "status": None, "limit": 10})
    assert str(key) == "dashboard:shared:services:limit=10:page=2:status=all"


def test_cache_key_without_filters():
    assert str(CacheKey("banner", "active")) == "banner:active"


def test_cache_key_bools():
    assert str(CacheKey("services", "active", {"homepage": True})) == "services:active:homepage=true"


def test_family_matches_every_key_of_the_entity():
    family = CacheKey.family(DASHBOARD_SHARED, "services")
    assert family == "dashboard:shared:services*"
    assert str(CacheKey(DASHBOARD_SHARED, "services", {"page": 1})).startswith(family[:-1])


@pytest.mark.asyncio
async def test_producer_runs_once_until_invalidated():
    cache = CacheService(FakeRedis())
    producer = AsyncMock(return_value={"count": 3})

    first = await cache.get_cached_data("dashboard:shared:stats", 60, producer)
    second = await cache.get_cached_data("dashboard:shared:stats", 60, producer)

    assert first == second == {"count": 3}
    assert producer.await_count == 1

    await cache.invalidate_cache("dashboard:shared:stats")
    await cache.get_cached_data("dashboard:shared:stats", 60, producer)
    assert producer.await_count == 2


@pytest.mark.asyncio
async def test_value_is_stored_as_json_with_ttl():
    redis = FakeRedis()
    cache = CacheService(redis)

    await cache.get_cached_data(CacheKey("banner", "active"), 300, AsyncMock(return_value=[1, 2]))

    assert json.loads(redis.store["banner:active"]) == [1, 2]
    assert "banner:active" in redis.expiry


@pytest.mark.asyncio
async def test_cache_errors_fall_through_to_producer():
    redis = FakeRedis()
    redis.fail = True
    cache = CacheService(redis)
    producer = AsyncMock(return_value={"ok": True})

    assert await cache.get_cached_data("k", 60, producer) == {"ok": True}
    assert await cache.get_cached_data("k", 60, producer) == {"ok": True}
    assert producer.await_count == 2


@pytest.mark.asyncio
async def test_missing_client_behaves_as_a_miss():
    cache = CacheService(None)
    producer = AsyncMock(return_value=5)
    assert await cache.get_cached_data("k", 60, producer) == 5
    assert await cache.invalidate_cache_pattern("k*") == 0


@pytest.mark.asyncio
async def test_producer_errors_propagate():
    cache = CacheService(FakeRedis())
    producer = AsyncMock(side_effect=RuntimeError("db down"))
    with pytest.raises(RuntimeError):
        await cache.get_cached_data("k", 60, producer)


@pytest.mark.asyncio
async def test_pattern_invalidation_only_touches_matching_keys():
    redis = FakeRedis()
    cache = CacheService(redis)
    await redis.set("services:active:homepage=all", "[]")
    await redis.set("services:active:homepage=true", "[]")
    await redis.set("service:slug:slug=market-research", "{}")

    deleted = await cache.invalidate_cache_pattern("services:active*")

    assert deleted == 2
    assert list(redis.store) == ["service:slug:slug=market-research"]


@pytest.mark.asyncio
async def test_invalidate_patterns_sums_deletions():
    redis = FakeRedis()
    cache = CacheService(redis)
    await redis.set("a:1", "1")
    await redis.set("b:1", "1")
    await redis.set("b:2", "1")

    assert await cache.invalidate_patterns("a*", "b*", "c*") == 3
    assert redis.store == {}


@pytest.mark.asyncio
async def test_invalidation_errors_are_absorbed():
    redis = FakeRedis()
    redis.fail = True
    cache = CacheService(redis)
    assert await cache.invalidate_cache("k") == 0
    assert await cache.invalidate_cache_pattern("k*") == 0
