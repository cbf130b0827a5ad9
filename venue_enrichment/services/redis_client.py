"""Redis client for caching pattern-learning suggestions."""
import json
import logging
import redis
import redis.asyncio as aioredis
from typing import Optional, Any
from venue_enrichment.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis client wrapper with JSON caching utilities. Errors are logged, never raised."""

    def __init__(self, client: Optional[aioredis.Redis] = None):
        self.client = client or aioredis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
            decode_responses=True
        )

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        try:
            value = await self.client.get(key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Redis GET error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with optional TTL."""
        try:
            serialized = json.dumps(value)
            if ttl:
                await self.client.setex(key, ttl, serialized)
            else:
                await self.client.set(key, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Redis SET error for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        try:
            await self.client.delete(key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis DELETE error for {key}: {e}")
            return False
