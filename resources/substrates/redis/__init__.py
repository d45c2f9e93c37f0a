"""Redis pub/sub substrate used as the multi-instance realtime backplane."""

from resources.substrates.redis.component import MANIFEST, RESOURCE_COMPONENT_ID
from resources.substrates.redis.config import RedisSettings, resolve_redis_settings
from resources.substrates.redis.redis_substrate import RedisClientSubstrate
from resources.substrates.redis.substrate import (
    MessageHandler,
    RedisHealthStatus,
    RedisSubstrate,
    Subscription,
)

__all__ = [
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "MessageHandler",
    "RedisClientSubstrate",
    "RedisHealthStatus",
    "RedisSettings",
    "RedisSubstrate",
    "Subscription",
    "resolve_redis_settings",
]
