"""Component declaration for the relational store substrate."""

from __future__ import annotations

from collections.abc import Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.manifest import (
    ComponentId,
    ComponentManifest,
    register_component,
)

RESOURCE_COMPONENT_ID = ComponentId("substrate_postgres")

MANIFEST = register_component(
    ComponentManifest(
        id=RESOURCE_COMPONENT_ID,
        kind="substrate",
        module_root="resources.substrates.postgres",
    )
)


def build_component(
    *, settings: CanteenSettings, components: Mapping[str, object]
) -> object:
    """Build the shared relational substrate for the configured backend."""
    del components
    from resources.substrates.postgres.config import resolve_postgres_settings
    from resources.substrates.postgres.substrate import SharedPostgresSubstrate

    postgres_settings = resolve_postgres_settings(settings)
    if settings.persistence.backend == "memory":
        return SharedPostgresSubstrate.in_memory(settings=postgres_settings)
    return SharedPostgresSubstrate(settings=postgres_settings)
