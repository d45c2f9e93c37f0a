"""Core-level aggregate health evaluation utilities."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from pydantic import BaseModel, ConfigDict, Field

from packages.canteen_shared.envelope import Envelope, EnvelopeKind, new_meta
from packages.canteen_shared.manifest import ComponentManifest, get_registry

DEFAULT_HEALTH_TIMEOUT_SECONDS = 2.0


class ComponentHealthResult(BaseModel):
    """One component-level readiness result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    required: bool = True
    detail: str = ""


class CoreHealthResult(BaseModel):
    """Aggregate readiness across services and shared substrates."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    services: dict[str, ComponentHealthResult] = Field(default_factory=dict)
    resources: dict[str, ComponentHealthResult] = Field(default_factory=dict)


def evaluate_core_health(
    *,
    components: Mapping[str, object],
    max_timeout_seconds: float = DEFAULT_HEALTH_TIMEOUT_SECONDS,
) -> CoreHealthResult:
    """Evaluate aggregate health from built components.

    A substrate only affects overall readiness when some service declares a
    dependency on it.
    """
    manifests = get_registry().list_components()
    required = {
        str(dependency)
        for manifest in manifests
        if manifest.kind == "service"
        for dependency in manifest.depends_on
    }
    services: dict[str, ComponentHealthResult] = {}
    resources: dict[str, ComponentHealthResult] = {}

    for manifest in manifests:
        component_id = str(manifest.id)
        is_service = manifest.kind == "service"
        result = _evaluate_component(
            manifest=manifest,
            component=components.get(component_id),
            required=is_service or component_id in required,
            max_timeout_seconds=max_timeout_seconds,
        )
        (services if is_service else resources)[component_id] = result

    ready = all(
        item.ready
        for item in [*services.values(), *resources.values()]
        if item.required
    )
    return CoreHealthResult(ready=ready, services=services, resources=resources)


def _evaluate_component(
    *,
    manifest: ComponentManifest,
    component: object | None,
    required: bool,
    max_timeout_seconds: float,
) -> ComponentHealthResult:
    if component is None:
        return ComponentHealthResult(
            ready=False, required=required, detail="component not built"
        )
    health_fn = getattr(component, "health", None)
    if not callable(health_fn):
        return ComponentHealthResult(
            ready=False, required=required, detail="component does not expose health()"
        )

    def _call() -> object:
        if manifest.kind == "service":
            return health_fn(
                meta=new_meta(
                    kind=EnvelopeKind.QUERY, source="core_health", principal="system"
                )
            )
        return health_fn()

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(_call)
        try:
            result = future.result(timeout=max_timeout_seconds)
        except FutureTimeoutError:
            return ComponentHealthResult(
                ready=False,
                required=required,
                detail=f"health() exceeded {max_timeout_seconds:.3f}s",
            )
        except Exception as exc:  # noqa: BLE001
            return ComponentHealthResult(
                ready=False,
                required=required,
                detail=f"health() raised {type(exc).__name__}",
            )

    ready, detail = _coerce_health_result(result)
    return ComponentHealthResult(ready=ready, required=required, detail=detail or "ok")


def _coerce_health_result(result: object) -> tuple[bool, str]:
    """Normalize an envelope or a ``ready``/``*_ready`` model into ready/detail."""
    if isinstance(result, Envelope):
        if result.first_error is not None:
            return False, result.first_error.message
        result = result.value
        if result is None:
            return True, ""

    if not hasattr(result, "model_dump"):
        return False, "health() returned unsupported result"
    values = result.model_dump(mode="python")
    detail = values.get("detail")
    detail = detail if isinstance(detail, str) else ""
    if isinstance(values.get("ready"), bool):
        return values["ready"], detail
    flags = [
        value
        for key, value in values.items()
        if key.endswith("_ready") and isinstance(value, bool)
    ]
    if not flags:
        return False, "health() result missing readiness fields"
    return all(flags), detail
