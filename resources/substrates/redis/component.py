"""Component declaration for the redis pub/sub substrate."""

from __future__ import annotations

from collections.abc import Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.manifest import (
    ComponentId,
    ComponentManifest,
    register_component,
)

RESOURCE_COMPONENT_ID = ComponentId("substrate_redis")

MANIFEST = register_component(
    ComponentManifest(
        id=RESOURCE_COMPONENT_ID,
        kind="substrate",
        module_root="resources.substrates.redis",
    )
)


def build_component(
    *, settings: CanteenSettings, components: Mapping[str, object]
) -> object:
    """Build the redis substrate; clients connect lazily on first use."""
    del components
    from resources.substrates.redis.config import resolve_redis_settings
    from resources.substrates.redis.redis_substrate import RedisClientSubstrate

    return RedisClientSubstrate(settings=resolve_redis_settings(settings))
