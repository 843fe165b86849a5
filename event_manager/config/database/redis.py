from redis.asyncio import Redis

from event_manager.config.env import REDIS_DB_CACHE, REDIS_HOST, REDIS_PORT

redis_cache: Redis = Redis(
    host=REDIS_HOST,
    port=REDIS_PORT,
    db=REDIS_DB_CACHE,
    decode_responses=True,
)


def get_redis_cache() -> Redis:
    return redis_cache
