"""Tests for component manifest validation and registry ordering."""

from __future__ import annotations

import subprocess
import sys

import pytest

from packages.canteen_shared.manifest import (
    ComponentId,
    ComponentManifest,
    ManifestError,
    ManifestRegistry,
)
from tests.shared.static_analysis_helpers import REPO_ROOT


def _substrate(name: str = "substrate_postgres") -> ComponentManifest:
    return ComponentManifest(
        id=ComponentId(name), kind="substrate", module_root="resources.x"
    )


def test_registry_lists_components_in_registration_order() -> None:
    registry = ManifestRegistry()
    registry.register(_substrate())
    registry.register(
        ComponentManifest(
            id=ComponentId("service_lock_controller"),
            kind="service",
            system="state",
            module_root="services.state.lock_controller",
            depends_on=frozenset({ComponentId("substrate_postgres")}),
        )
    )

    assert [str(item.id) for item in registry.list_components()] == [
        "substrate_postgres",
        "service_lock_controller",
    ]


def test_identical_registration_is_idempotent_but_conflict_fails() -> None:
    registry = ManifestRegistry()
    registry.register(_substrate())
    registry.register(_substrate())

    with pytest.raises(ManifestError):
        registry.register(
            ComponentManifest(
                id=ComponentId("substrate_postgres"),
                kind="substrate",
                module_root="resources.other",
            )
        )
    assert len(registry.list_components()) == 1


def _service(name: str, *depends_on: str) -> ComponentManifest:
    return ComponentManifest(
        id=ComponentId(name),
        kind="service",
        system="state",
        module_root=f"services.state.{name}",
        depends_on=frozenset(ComponentId(item) for item in depends_on),
    )


def test_build_order_puts_dependencies_first_regardless_of_registration() -> None:
    registry = ManifestRegistry()
    registry.register(
        _service("service_lock_controller", "substrate_postgres", "service_purge")
    )
    registry.register(_service("service_purge", "substrate_postgres"))
    registry.register(_substrate())

    order = [str(item.id) for item in registry.build_order()]

    assert order.index("substrate_postgres") < order.index("service_purge")
    assert order.index("service_purge") < order.index("service_lock_controller")
    assert len(order) == 3


def test_registering_before_dependencies_is_allowed_until_build() -> None:
    registry = ManifestRegistry()
    registry.register(_service("service_purge", "substrate_postgres"))

    with pytest.raises(ManifestError, match="substrate_postgres"):
        registry.build_order()


def test_build_order_rejects_dependency_cycles() -> None:
    registry = ManifestRegistry()
    registry.register(_service("service_alpha", "service_beta"))
    registry.register(_service("service_beta", "service_alpha"))

    with pytest.raises(ManifestError, match="cycle"):
        registry.build_order()


@pytest.mark.parametrize(
    "module",
    [
        "services.state.lock_controller.implementation",
        "services.state.registration_store.api",
        "packages.canteen_shared.config",
    ],
)
def test_service_modules_import_in_a_fresh_interpreter(module: str) -> None:
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=REPO_ROOT,
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0, result.stderr


@pytest.mark.parametrize(
    ("component_id", "kind", "system"),
    [
        ("Service_Bad", "service", "state"),
        ("substrate_redis", "service", "action"),
        ("service_no_system", "service", None),
    ],
)
def test_manifest_validation_rejects_bad_declarations(
    component_id: str, kind: str, system: str | None
) -> None:
    with pytest.raises(ManifestError):
        ComponentManifest(
            id=ComponentId(component_id),
            kind=kind,  # type: ignore[arg-type]
            system=system,  # type: ignore[arg-type]
            module_root="services.x",
        )


def test_unknown_component_lookup_fails() -> None:
    with pytest.raises(ManifestError):
        ManifestRegistry().get(ComponentId("service_missing"))
