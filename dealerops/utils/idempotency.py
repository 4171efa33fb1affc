import json
import logging
from dealerops.core.redis import get_redis, redis_available
from dealerops.core.config import settings

logger = logging.getLogger(__name__)


def _key(scope: str, key: str) -> str:
    return f"idemp:{scope}:{key}"

async def get_idempotent(scope: str, key: str):
    if not key:
        return None
    if not redis_available():
        logger.warning(f"Redis unavailable; idempotency key {key} not checked")
        return None
    redis = get_redis()
    v = await redis.get(_key(scope, key))
    return json.loads(v) if v else None

async def set_idempotent(scope: str, key: str, value: dict):
    if not redis_available():
        return
    redis = get_redis()
    await redis.set(_key(scope, key), json.dumps(value, default=str), ex=settings.IDEMPOTENCY_TTL)
