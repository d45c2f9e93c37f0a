"""FastAPI routes for reading and setting per-date locks."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, StrictBool

from packages.canteen_shared.envelope import EnvelopeKind, new_meta
from packages.canteen_shared.http import envelope_response, error_response
from packages.canteen_shared.identity import RequestAuthorizer
from services.state.lock_controller.service import LockControllerService

SET_LOCK_OPERATION = "set_lock"
GET_LOCK_OPERATION = "get_lock"


class LockRequest(BaseModel):
    """Body of ``POST /lunch/lock``."""

    model_config = ConfigDict(extra="ignore")

    date: str
    locked: StrictBool


def register_routes(
    *,
    router: APIRouter,
    service: LockControllerService,
    authorizer: RequestAuthorizer,
) -> None:
    """Register ``POST /lunch/lock`` and ``GET /lunch/lock`` on ``router``."""

    @router.post("/lunch/lock")
    def set_lock(body: LockRequest, request: Request) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=SET_LOCK_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        return envelope_response(
            service.set_lock(
                meta=new_meta(
                    kind=EnvelopeKind.COMMAND, source="http", principal=actor.actor_id
                ),
                date=body.date,
                locked=body.locked,
                actor=actor.actor_name,
            )
        )

    @router.get("/lunch/lock")
    def get_lock(request: Request, date: str = Query(...)) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=GET_LOCK_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        return envelope_response(
            service.get_lock(
                meta=new_meta(
                    kind=EnvelopeKind.QUERY, source="http", principal=actor.actor_id
                ),
                date=date,
            )
        )
