from redis.asyncio import Redis

from app.platform.logger import get_logger

logger = get_logger(__name__)


def create_redis_client(url: str, socket_timeout: float = 5.0) -> Redis:
    """Build the process-wide Redis client. Connections are opened lazily."""
    return Redis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=socket_timeout,
        socket_timeout=socket_timeout,
        retry_on_timeout=True,
        health_check_interval=30,
    )


async def ping_redis(client: Redis) -> bool:
    try:
        await client.ping()
        logger.info("Redis connected and ready")
        return True
    except Exception as e:
        logger.warning(f"Redis unavailable, reads will fall through to the database: {e}")
        return False


async def close_redis(client: Redis) -> None:
    try:
        await client.aclose()
        logger.info("Redis connection closed")
    except Exception as e:
        logger.warning(f"Error closing Redis connection: {e}")
