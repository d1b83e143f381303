import asyncio
import json
from typing import Any, Awaitable, Callable, Optional, Union

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from redis.asyncio import Redis

from app.platform.cache.keys import CacheKey
from app.platform.logger import get_logger

logger = get_logger(__name__)

Producer = Callable[[], Awaitable[Any]]
KeyLike = Union[str, CacheKey]


class CacheService:
    """
    Cache-aside accessor over Redis.

    Reads go through :meth:`get_cached_data`; writes call
    :meth:`invalidate_patterns` with every key family that could hold a view
    of the changed record. Redis failures never reach the caller: reads fall
    through to the producer and invalidations are logged.
    """

    def __init__(self, redis: Optional[Redis]):
        self.redis = redis

    async def get_cached_data(self, key: KeyLike, ttl: int, producer: Producer) -> Any:
        key = str(key)
        cached = None
        try:
            if self.redis is not None:
                cached = await self.redis.get(key)
        except Exception as e:
            logger.warning(f"[CACHE ERROR] get {key}: {e}")
            cached = None

        if cached is not None:
            logger.debug(f"[CACHE HIT] {key}")
            return json.loads(cached)

        logger.debug(f"[CACHE MISS] {key}")
        # Encoded before storing so a miss returns exactly what a later hit would.
        data = jsonable_encoder(await producer())

        try:
            if self.redis is not None:
                await self.redis.set(key, json.dumps(data), ex=ttl)
                logger.debug(f"[CACHED] {key} for {ttl}s")
        except Exception as e:
            logger.warning(f"[CACHE ERROR] set {key}: {e}")

        return data

    async def invalidate_cache(self, key: KeyLike) -> int:
        key = str(key)
        try:
            if self.redis is None:
                return 0
            deleted = await self.redis.delete(key)
            if deleted:
                logger.info(f"[CACHE INVALIDATED] key {key}")
            return deleted
        except Exception as e:
            logger.warning(f"[CACHE ERROR] delete {key}: {e}")
            return 0

    async def invalidate_cache_pattern(self, pattern: str) -> int:
        try:
            if self.redis is None:
                return 0
            keys = [k async for k in self.redis.scan_iter(match=pattern, count=500)]
            if not keys:
                return 0
            deleted = await self.redis.delete(*keys)
            logger.info(f"[CACHE INVALIDATED] {deleted} keys matching {pattern}")
            return deleted
        except Exception as e:
            logger.warning(f"[CACHE ERROR] invalidate pattern {pattern}: {e}")
            return 0

    async def invalidate_patterns(self, *patterns: str) -> int:
        results = await asyncio.gather(*(self.invalidate_cache_pattern(p) for p in patterns))
        return sum(results)


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache
