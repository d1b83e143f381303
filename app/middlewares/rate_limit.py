# app/middlewares/rate_limit.py
import time

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware

from app.platform.config import settings
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window limiter per client IP over every path under the API prefix.

    Counters live in the app's Redis client. When Redis is unreachable the
    request is let through; FORCE_IN_MEMORY_RATE_LIMITER keeps counters in
    process instead, for tests.
    """

    def __init__(self, app, max_requests: int = None, window_seconds: int = None):
        super().__init__(app)
        self.max_requests = max_requests or settings.RATE_LIMIT_MAX_REQUESTS
        self.window = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS
        self.memory_store = {}
        self._next_sweep = 0.0

    def _too_many(self, retry_after: int):
        response = api_response(
            message=RATE_LIMIT_MESSAGE,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            code="RATE_LIMITED",
        )
        response.headers["Retry-After"] = str(max(retry_after, 1))
        return response

    def _sweep_memory(self, now: float):
        """Drop every window that has already closed; runs at most once per window."""
        if now < self._next_sweep:
            return
        expired = [k for k, (_, expiry) in self.memory_store.items() if expiry <= now]
        for k in expired:
            del self.memory_store[k]
        self._next_sweep = now + self.window

    def _hit_memory(self, key: str):
        now = time.time()
        self._sweep_memory(now)
        count, expiry = self.memory_store.get(key, (0, now + self.window))
        if now > expiry:
            count, expiry = 0, now + self.window
        count += 1
        self.memory_store[key] = (count, expiry)
        return count, int(expiry - now)

    async def _hit_redis(self, redis, key: str):
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, self.window)
        ttl = await redis.ttl(key)
        return count, ttl if ttl and ttl > 0 else self.window

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(settings.API_PREFIX):
            return await call_next(request)

        client_ip = request.client.host if request.client else "testclient"
        if client_ip in settings.WHITELIST_IPS:
            return await call_next(request)

        key = f"rl:{client_ip}"

        if settings.FORCE_IN_MEMORY_RATE_LIMITER:
            count, retry_after = self._hit_memory(key)
        else:
            redis = getattr(request.app.state, "redis", None)
            if redis is None:
                return await call_next(request)
            try:
                count, retry_after = await self._hit_redis(redis, key)
            except Exception as e:
                logger.warning(f"Rate limiter unavailable, allowing request: {e}")
                return await call_next(request)

        if count > self.max_requests:
            logger.info(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            return self._too_many(retry_after)

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(self.max_requests - count, 0))
        return response
