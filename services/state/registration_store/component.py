"""Component declaration for Registration Store Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.manifest import (
    ComponentId,
    ComponentManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_registration_store")

MANIFEST = register_component(
    ComponentManifest(
        id=SERVICE_COMPONENT_ID,
        kind="service",
        system="state",
        module_root="services.state.registration_store",
        depends_on=frozenset(
            {
                ComponentId("substrate_postgres"),
                ComponentId("service_realtime_fanout"),
                ComponentId("service_retention_purge"),
                ComponentId("service_lock_controller"),
            }
        ),
    )
)


def build_component(
    *, settings: CanteenSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.state.registration_store.service import (
        build_registration_store_service,
    )

    return build_registration_store_service(
        settings=settings,
        postgres=components["substrate_postgres"],
        locks=components["service_lock_controller"],
        fanout=components["service_realtime_fanout"],
        retention=components["service_retention_purge"],
    )
