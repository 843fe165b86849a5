import logging

from redis.exceptions import RedisError

from event_manager.app.common.exceptions import PersistenceUnavailable
from event_manager.config.database.redis import get_redis_cache

logger = logging.getLogger(__name__)

redis_client = get_redis_cache()


async def save_to_redis(key: str, value: str, expiry: int):
    try:
        await redis_client.set(key, value, ex=expiry)
    except RedisError as e:
        logger.error(f"Redis save error (Key: {key}): {e}")
        raise PersistenceUnavailable("Cache is unavailable, please retry")


async def get_from_redis(key: str) -> str | None:
    try:
        return await redis_client.get(key)
    except RedisError as e:
        logger.error(f"Redis get error (Key: {key}): {e}")
        raise PersistenceUnavailable("Cache is unavailable, please retry")


async def pop_from_redis(key: str) -> str | None:
    # GETDEL: only one caller ever sees the value
    try:
        return await redis_client.getdel(key)
    except RedisError as e:
        logger.error(f"Redis getdel error (Key: {key}): {e}")
        raise PersistenceUnavailable("Cache is unavailable, please retry")


def get_redis_key_password_reset(email: str) -> str:
    return f"password_reset:{email.lower()}"
