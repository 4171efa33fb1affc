"""Shared Redis client for rate limiting and idempotency keys.

The API starts without Redis; callers check ``redis_available()`` and skip
their Redis-backed behaviour when the client is absent.
"""
import logging
from typing import Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from dealerops.core.config import settings

logger = logging.getLogger(__name__)

_client: Optional[Redis] = None


async def init_redis() -> Redis:
    global _client
    client = Redis.from_url(settings.REDIS_URL, decode_responses=False)
    try:
        await client.ping()
    except RedisError as e:
        logger.error(f"Failed to connect to Redis at {settings.REDIS_URL}: {e}")
        await client.aclose()
        raise
    _client = client
    logger.info(f"Connected to Redis at {settings.REDIS_URL}")
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def ping_redis() -> bool:
    if _client is None:
        return False
    try:
        return bool(await _client.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False


def redis_available() -> bool:
    return _client is not None


def get_redis() -> Redis:
    if _client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _client
