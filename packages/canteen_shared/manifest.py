"""Component manifest model and registry.

Each component module registers one manifest at import time, in whatever order
modules happen to be imported. Dependencies are checked and ordered only when
the runtime asks for a build order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
from threading import RLock
from typing import Final, Literal, NewType

ComponentId = NewType("ComponentId", str)

ComponentKind = Literal["substrate", "service"]
System = Literal["state", "action"]

_COMPONENT_ID_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z][a-z0-9_]{1,62}$")


class ManifestError(ValueError):
    """Raised when manifest definitions or registration are invalid."""


@dataclass(frozen=True, slots=True)
class ComponentManifest:
    """Declaration of one buildable component."""

    id: ComponentId
    kind: ComponentKind
    module_root: str
    system: System | None = None
    depends_on: frozenset[ComponentId] = frozenset()

    def __post_init__(self) -> None:
        validate_component_id(self.id)
        expected = f"{self.kind}_"
        if not str(self.id).startswith(expected):
            raise ManifestError(
                f"component id '{self.id}' must start with '{expected}'"
            )
        if self.kind == "service" and self.system is None:
            raise ManifestError(f"service '{self.id}' must declare a system")
        for dependency in self.depends_on:
            validate_component_id(dependency)


class ManifestRegistry:
    """Thread-safe registry of component manifests in registration order."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._components: dict[ComponentId, ComponentManifest] = {}

    def register(self, manifest: ComponentManifest) -> ComponentManifest:
        """Register one manifest; re-registering the identical manifest is a no-op."""
        with self._lock:
            existing = self._components.get(manifest.id)
            if existing is not None:
                if existing != manifest:
                    raise ManifestError(f"duplicate component id: {manifest.id}")
                return existing
            self._components[manifest.id] = manifest
            return manifest

    def get(self, component_id: ComponentId) -> ComponentManifest:
        with self._lock:
            try:
                return self._components[component_id]
            except KeyError as exc:
                raise ManifestError(f"unknown component id: {component_id}") from exc

    def list_components(self) -> tuple[ComponentManifest, ...]:
        with self._lock:
            return tuple(self._components.values())

    def build_order(self) -> tuple[ComponentManifest, ...]:
        """Return components with every dependency ahead of its dependents.

        Raises ``ManifestError`` for unregistered dependencies or cycles.
        """
        with self._lock:
            components = dict(self._components)
        graph: dict[ComponentId, tuple[ComponentId, ...]] = {}
        for component_id, manifest in components.items():
            missing = sorted(
                str(dependency)
                for dependency in manifest.depends_on
                if dependency not in components
            )
            if missing:
                raise ManifestError(
                    f"component '{component_id}' depends on unregistered: "
                    + ", ".join(missing)
                )
            graph[component_id] = tuple(sorted(manifest.depends_on))
        try:
            ordered = tuple(TopologicalSorter(graph).static_order())
        except CycleError as exc:
            raise ManifestError(f"component dependency cycle: {exc.args[1]}") from exc
        return tuple(components[component_id] for component_id in ordered)


_REGISTRY = ManifestRegistry()


def validate_component_id(value: ComponentId) -> None:
    """Validate canonical component id format."""
    if not _COMPONENT_ID_RE.fullmatch(str(value)):
        raise ManifestError(
            f"invalid component id '{value}': expected lowercase snake_case"
        )


def register_component(manifest: ComponentManifest) -> ComponentManifest:
    """Register one manifest in the process-wide registry."""
    return _REGISTRY.register(manifest)


def get_registry() -> ManifestRegistry:
    return _REGISTRY
