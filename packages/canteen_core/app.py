"""FastAPI application assembly for the Canteen runtime."""

from __future__ import annotations

from collections.abc import Mapping

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse

from packages.canteen_core.access import RoleTableAuthorizer
from packages.canteen_core.components import resolve_http_registrar
from packages.canteen_core.health import evaluate_core_health
from packages.canteen_shared.http import create_app
from packages.canteen_shared.identity import RequestAuthorizer
from packages.canteen_shared.logging import get_logger
from packages.canteen_shared.manifest import get_registry

_LOGGER = get_logger(__name__)


def create_core_app(
    *,
    components: Mapping[str, object],
    authorizer: RequestAuthorizer | None = None,
) -> FastAPI:
    """Create the app with ``/health`` and every service's routes."""
    app = create_app(title="Canteen Registration API")
    router = APIRouter()
    resolved_authorizer = authorizer or RoleTableAuthorizer()

    @router.get("/health")
    def health() -> JSONResponse:
        result = evaluate_core_health(components=components)
        return JSONResponse(
            status_code=200 if result.ready else 503,
            content=result.model_dump(mode="json"),
        )

    registered: list[str] = []
    for manifest in get_registry().list_components():
        if manifest.kind != "service":
            continue
        service = components.get(str(manifest.id))
        registrar = resolve_http_registrar(manifest)
        if registrar is None or service is None:
            continue
        registrar(router=router, service=service, authorizer=resolved_authorizer)
        registered.append(str(manifest.id))

    app.include_router(router)
    _LOGGER.info("HTTP routes registered: services=%s", ",".join(registered))
    return app
