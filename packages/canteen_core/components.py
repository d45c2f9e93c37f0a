"""Component import, build and HTTP registrar resolution."""

from __future__ import annotations

import importlib
import importlib.util
from collections.abc import Callable, Iterable, Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.logging import fields, get_logger
from packages.canteen_shared.manifest import ComponentManifest, get_registry

_LOGGER = get_logger(__name__)

COMPONENT_MODULES: tuple[str, ...] = (
    "resources.substrates.postgres.component",
    "resources.substrates.redis.component",
    "services.action.realtime_fanout.component",
    "services.state.retention_purge.component",
    "services.state.lock_controller.component",
    "services.state.registration_store.component",
)


def import_component_modules(
    modules: Iterable[str] = COMPONENT_MODULES,
) -> tuple[str, ...]:
    """Import component declaration modules in dependency order."""
    imported: list[str] = []
    for module in modules:
        importlib.import_module(module)
        imported.append(module)
    return tuple(imported)


def build_components(
    settings: CanteenSettings,
    *,
    prebuilt: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """Import and build every component, dependencies first.

    ``prebuilt`` instances are used as-is, which lets tests swap in fakes.
    """
    import_component_modules()
    built: dict[str, object] = dict(prebuilt or {})
    for manifest in get_registry().build_order():
        component_id = str(manifest.id)
        if component_id in built:
            continue
        builder = _resolve_builder(manifest)
        built[component_id] = builder(settings=settings, components=built)
        _LOGGER.info(
            "Component built: kind=%s",
            manifest.kind,
            extra={fields.COMPONENT_ID: component_id},
        )
    return built


def resolve_http_registrar(
    manifest: ComponentManifest,
) -> Callable[..., None] | None:
    """Return ``register_routes`` from the component's ``api`` module, if any."""
    module_name = f"{manifest.module_root}.api"
    if importlib.util.find_spec(module_name) is None:
        return None
    registrar = getattr(importlib.import_module(module_name), "register_routes", None)
    return registrar if callable(registrar) else None


def _resolve_builder(manifest: ComponentManifest) -> Callable[..., object]:
    module = importlib.import_module(f"{manifest.module_root}.component")
    builder = getattr(module, "build_component", None)
    if not callable(builder):
        raise RuntimeError(
            f"component '{manifest.id}' does not expose build_component(...)"
        )
    return builder
