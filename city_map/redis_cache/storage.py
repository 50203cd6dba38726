"""Redis persistence for the city registry."""

import os
from functools import partial

from redis import Redis
from redis.exceptions import RedisError

from city_map.logging_config import logger
from city_map.records.parser import SAMPLE_DATA, parse, serialize
from city_map.registry.registry import CityRegistry

redis_client = Redis(
    host=os.getenv("REDIS_HOST", "redis"),
    port=int(os.getenv("REDIS_PORT", "6379")),
    db=int(os.getenv("REDIS_DB", "0")),
    decode_responses=True,
)
CITIES_KEY = os.getenv("CITIES_KEY", "cities")


class RegistryStore:
    """Loads and saves a CityRegistry as record text under one Redis key."""

    def __init__(self, client, key: str = CITIES_KEY):
        self.redis_client: Redis = client
        self.key = key

    def load(self) -> CityRegistry:
        """Build a registry from the stored text.

        Falls back to the sample data when nothing is stored or Redis
        cannot be reached.

        Returns:
            A new CityRegistry.
        """
        try:
            data = self.redis_client.get(self.key)
        except RedisError as exc:
            logger.error("REDIS_LOAD_CITIES_FAILED", key=self.key, error=str(exc))
            data = None
        if not data:
            logger.info("CITIES_SAMPLE_DATA_USED", key=self.key)
            data = SAMPLE_DATA
        registry = CityRegistry(parse(data))
        logger.info("CITIES_LOADED", key=self.key, count=len(registry))
        return registry

    def save(self, registry: CityRegistry) -> str:
        """Serialize the registry and write it to Redis.

        Args:
            registry: Registry to persist.

        Returns:
            The serialized text, also when the write fails.
        """
        data = serialize(registry.all())
        try:
            self.redis_client.set(self.key, data)
            logger.info("CITIES_SAVED", key=self.key, count=len(registry))
        except RedisError as exc:
            logger.error("REDIS_SAVE_CITIES_FAILED", key=self.key, error=str(exc))
        return data


registry_store = partial(RegistryStore, client=redis_client)
