"""
Report cache backed by Redis.
Fails open: without Redis every lookup is a miss and writes are dropped.
"""
import json
import logging
from typing import Any, Optional

import redis

from . import config

logger = logging.getLogger(__name__)

# Shared by the URL and host/port forms
CONNECTION_OPTIONS = {
    "decode_responses": True,
    "socket_connect_timeout": 5,
    "socket_timeout": 10,
    "retry_on_timeout": True,
    "health_check_interval": 30,
}

redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Connect once and reuse; REDIS_URL wins over host/port settings"""
    global redis_client

    if redis_client is None:
        if config.REDIS_URL:
            client = redis.from_url(config.REDIS_URL, **CONNECTION_OPTIONS)
        else:
            client = redis.Redis(
                host=config.REDIS_HOST,
                port=config.REDIS_PORT,
                password=config.REDIS_PASSWORD,
                db=config.REDIS_DB,
                ssl=config.REDIS_SSL,
                **CONNECTION_OPTIONS,
            )
        client.ping()
        logger.info("📡 Report cache connected to Redis")
        redis_client = client

    return redis_client


class Cache:
    """JSON values with a TTL, keyed by report name"""

    def __init__(self, enabled: Optional[bool] = None):
        self.enabled = config.CACHE_ENABLED if enabled is None else enabled
        self.redis_client = None

    def _get_client(self):
        if not self.enabled:
            return None
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Report cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if not client:
            return None
        try:
            value = client.get(key)
        except Exception as e:
            logger.error(f"❌ Cache read failed for {key}: {e}")
            return None
        return json.loads(value) if value else None

    def set(self, key: str, value: Any, ttl: int) -> bool:
        client = self._get_client()
        if not client:
            return False
        try:
            client.setex(key, ttl, json.dumps(value, default=str))
        except Exception as e:
            logger.error(f"❌ Cache write failed for {key}: {e}")
            return False
        return True


cache = Cache()
