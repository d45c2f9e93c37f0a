"""Public API for Canteen runtime assembly."""

from packages.canteen_core.access import OPERATION_ROLES, RoleTableAuthorizer, authorize
from packages.canteen_core.app import create_core_app
from packages.canteen_core.components import (
    COMPONENT_MODULES,
    build_components,
    import_component_modules,
    resolve_http_registrar,
)
from packages.canteen_core.health import (
    ComponentHealthResult,
    CoreHealthResult,
    evaluate_core_health,
)
from packages.canteen_core.identity import HeaderIdentityProvider

__all__ = [
    "COMPONENT_MODULES",
    "ComponentHealthResult",
    "CoreHealthResult",
    "HeaderIdentityProvider",
    "OPERATION_ROLES",
    "RoleTableAuthorizer",
    "authorize",
    "build_components",
    "create_core_app",
    "evaluate_core_health",
    "import_component_modules",
    "resolve_http_registrar",
]
