import logging
from fastapi import HTTPException
from dealerops.core.redis import get_redis, redis_available
from dealerops.core.config import settings
from dealerops.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)

async def check_rate_limit(user_id: int):
    if not settings.RATE_LIMIT_ENABLED:
        return
    if not redis_available():
        logger.warning(f"Redis unavailable; rate limit not enforced for user {user_id}")
        return
    redis = get_redis()
    key = f"rl:{user_id}"
    current = await redis.get(key)
    if current is None:
        await redis.set(key, "1", ex=settings.RATE_LIMIT_WINDOW)
        return
    count = int(current)
    if count >= settings.RATE_LIMIT:
        rate_limit_exceeded.labels(user_id=str(user_id)).inc()
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    await redis.incr(key)
