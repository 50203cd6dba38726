"""Availability probe for the Redis registry store."""

from redis.exceptions import RedisError

from city_map.logging_config import logger
from city_map.models.health import ServiceStatus
from city_map.redis_cache.storage import CITIES_KEY, redis_client


def is_redis_available() -> ServiceStatus:
    """Ping the Redis server that holds the saved city records."""
    try:
        redis_client.ping()
    except RedisError as exc:
        logger.error("REDIS_STORE_UNAVAILABLE", key=CITIES_KEY, error=str(exc))
        return ServiceStatus.not_available
    logger.info("REDIS_STORE_AVAILABLE", key=CITIES_KEY)
    return ServiceStatus.available
