"""Component declaration for Realtime Fan-out Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.manifest import (
    ComponentId,
    ComponentManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_realtime_fanout")

MANIFEST = register_component(
    ComponentManifest(
        id=SERVICE_COMPONENT_ID,
        kind="service",
        system="action",
        module_root="services.action.realtime_fanout",
    )
)


def build_component(
    *, settings: CanteenSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.action.realtime_fanout.service import build_realtime_fanout_service

    return build_realtime_fanout_service(
        settings=settings,
        redis=components.get("substrate_redis"),
    )
