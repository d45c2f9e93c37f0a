"""Component declaration for Lock Controller Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.manifest import (
    ComponentId,
    ComponentManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_lock_controller")

MANIFEST = register_component(
    ComponentManifest(
        id=SERVICE_COMPONENT_ID,
        kind="service",
        system="state",
        module_root="services.state.lock_controller",
        depends_on=frozenset(
            {
                ComponentId("substrate_postgres"),
                ComponentId("service_realtime_fanout"),
                ComponentId("service_retention_purge"),
            }
        ),
    )
)


def build_component(
    *, settings: CanteenSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.state.lock_controller.service import build_lock_controller_service

    return build_lock_controller_service(
        settings=settings,
        postgres=components["substrate_postgres"],
        fanout=components["service_realtime_fanout"],
        retention=components["service_retention_purge"],
    )
