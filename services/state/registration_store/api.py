"""FastAPI routes for unit registrations, history and the daily summary."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt

from packages.canteen_shared.envelope import EnvelopeKind, EnvelopeMeta, new_meta
from packages.canteen_shared.errors import ErrorDetail
from packages.canteen_shared.http import envelope_response, error_response
from packages.canteen_shared.identity import Actor, RequestAuthorizer
from services.state.registration_store.service import RegistrationStoreService

SUMMARY_OPERATION = "summary"
SET_REGISTRATION_OPERATION = "set_registration"
GET_REGISTRATION_OPERATION = "get_registration"
LIST_HISTORY_OPERATION = "list_history"
LIST_ALL_HISTORY_OPERATION = "list_all_history"
CLEAR_REGISTRATION_OPERATION = "clear_registration"

_UNIT_ALIASES = AliasChoices("unitId", "departmentId")


class RegistrationRequest(BaseModel):
    """Body of ``POST /lunch/department``.

    ``totalCount`` is accepted from older clients and counts as regular
    meals when ``regularCount`` is absent.
    """

    model_config = ConfigDict(extra="ignore")

    date: str
    regular_count: StrictInt | None = Field(default=None, alias="regularCount")
    veg_count: StrictInt | None = Field(default=None, alias="vegCount")
    total_count: StrictInt | None = Field(default=None, alias="totalCount")
    unit_id: str | None = Field(default=None, validation_alias=_UNIT_ALIASES)


class ClearRequest(BaseModel):
    """Body of ``POST /lunch/department/clear``."""

    model_config = ConfigDict(extra="ignore")

    date: str
    unit_id: str = Field(validation_alias=_UNIT_ALIASES)


def register_routes(
    *,
    router: APIRouter,
    service: RegistrationStoreService,
    authorizer: RequestAuthorizer,
) -> None:
    """Register the ``/lunch`` summary and department routes on ``router``."""

    @router.get("/lunch/summary")
    def summary(request: Request, date: str = Query(...)) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=SUMMARY_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        return envelope_response(
            service.summary_for_date(meta=_meta(actor, EnvelopeKind.QUERY), date=date)
        )

    @router.post("/lunch/department")
    def set_registration(body: RegistrationRequest, request: Request) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=SET_REGISTRATION_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        unit_id, errors = _resolve_unit(authorizer, actor, body.unit_id)
        if errors:
            return error_response(errors)

        regular = body.regular_count
        if regular is None:
            regular = body.total_count if body.total_count is not None else 0
        return envelope_response(
            service.set_registration(
                meta=_meta(actor, EnvelopeKind.COMMAND),
                unit_id=unit_id,
                date=body.date,
                regular_count=regular,
                veg_count=body.veg_count if body.veg_count is not None else 0,
                actor=actor.actor_name,
            )
        )

    @router.get("/lunch/department")
    def get_registration(
        request: Request,
        date: str = Query(...),
        unit_id: str | None = Query(default=None, alias="unitId"),
    ) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=GET_REGISTRATION_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        resolved, errors = _resolve_unit(authorizer, actor, unit_id)
        if errors:
            return error_response(errors)
        return envelope_response(
            service.get_registration(
                meta=_meta(actor, EnvelopeKind.QUERY), date=date, unit_id=resolved
            )
        )

    @router.get("/lunch/department/history")
    def list_history(
        request: Request,
        limit: int | None = Query(default=None),
        unit_id: str | None = Query(default=None, alias="unitId"),
    ) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=LIST_HISTORY_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        resolved, errors = _resolve_unit(authorizer, actor, unit_id)
        if errors:
            return error_response(errors)
        return envelope_response(
            service.list_history(
                meta=_meta(actor, EnvelopeKind.QUERY), unit_id=resolved, limit=limit
            )
        )

    @router.get("/lunch/department/audit")
    def list_all_history(
        request: Request, limit: int | None = Query(default=None)
    ) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=LIST_ALL_HISTORY_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        return envelope_response(
            service.list_all_history(meta=_meta(actor, EnvelopeKind.QUERY), limit=limit)
        )

    @router.post("/lunch/department/clear")
    def clear_registration(body: ClearRequest, request: Request) -> JSONResponse:
        actor, errors = authorizer.authorize_request(
            headers=request.headers, operation=CLEAR_REGISTRATION_OPERATION
        )
        if errors or actor is None:
            return error_response(errors)
        return envelope_response(
            service.clear_registration(
                meta=_meta(actor, EnvelopeKind.COMMAND),
                date=body.date,
                unit_id=body.unit_id,
                actor=actor.actor_name,
            )
        )


def _meta(actor: Actor, kind: EnvelopeKind) -> EnvelopeMeta:
    return new_meta(kind=kind, source="http", principal=actor.actor_id)


def _resolve_unit(
    authorizer: RequestAuthorizer, actor: Actor, requested: str | None
) -> tuple[str, list[ErrorDetail]]:
    """Default to the actor's own unit; naming another one needs permission."""
    if requested is None or requested.strip() == "":
        return actor.unit_id or "", []
    requested = requested.strip()
    if requested == actor.unit_id:
        return requested, []
    return requested, authorizer.authorize_unit(actor=actor, unit_id=requested)
