"""Component declaration for Retention Purge Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.manifest import (
    ComponentId,
    ComponentManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_retention_purge")

MANIFEST = register_component(
    ComponentManifest(
        id=SERVICE_COMPONENT_ID,
        kind="service",
        system="state",
        module_root="services.state.retention_purge",
        depends_on=frozenset({ComponentId("substrate_postgres")}),
    )
)


def build_component(
    *, settings: CanteenSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.state.retention_purge.service import build_retention_purge_service

    return build_retention_purge_service(
        settings=settings,
        postgres=components["substrate_postgres"],
    )
