import redis.asyncio as redis
import logging
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

# Redis connection shared by the rate limiters
redis_client: Optional[redis.Redis] = None


async def init_redis() -> None:
    """Initialize Redis connection"""
    global redis_client

    try:
        redis_client = redis.from_url(
            settings.REDIS_URL,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30
        )

        await redis_client.ping()
        logger.info("Redis connection established successfully")

    except Exception as e:
        # Rate limiting degrades to a no-op without Redis
        logger.error(f"Failed to connect to Redis: {e}")
        redis_client = None


async def get_redis() -> redis.Redis:
    """Get Redis client instance"""
    if redis_client is None:
        raise RuntimeError("Redis client not initialized")
    return redis_client


async def close_redis() -> None:
    """Close Redis connection"""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis connection closed")


class RedisService:
    """Thin Redis wrapper whose failures never propagate to callers.

    Without an explicit client the shared connection is looked up on every
    call, so a reconnect through ``init_redis`` is picked up.
    """

    def __init__(self, client: Optional[redis.Redis] = None):
        self.client = client

    async def get_client(self) -> redis.Redis:
        if self.client is not None:
            return self.client
        return await get_redis()

    async def increment_window(self, key: str, window_seconds: int) -> Optional[int]:
        """Increment a counter, starting its expiry window on the first hit"""
        try:
            client = await self.get_client()
        except RuntimeError:
            # not connected; init_redis already logged the cause
            return None

        try:
            count = await client.incr(key)
            if count == 1:
                await client.expire(key, window_seconds)
            return count
        except Exception as e:
            logger.error(f"Redis INCR error: {e}")
            return None


redis_service = RedisService()
