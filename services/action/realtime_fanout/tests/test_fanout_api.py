"""WebSocket route tests for realtime subscriptions."""

from __future__ import annotations

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from packages.canteen_shared.envelope import EnvelopeKind, new_meta
from packages.canteen_shared.errors import ErrorDetail, codes, policy_error
from packages.canteen_shared.identity import Actor
from services.action.realtime_fanout.api import register_routes
from services.action.realtime_fanout.config import RealtimeFanoutSettings
from services.action.realtime_fanout.domain import EVENT_LOCK
from services.action.realtime_fanout.hub import RealtimeHub
from services.action.realtime_fanout.implementation import DefaultRealtimeFanoutService
from services.action.realtime_fanout.transports import InProcessFanoutTransport


class _RoleAuthorizer:
    """Admit readers by the ``X-Role`` header only."""

    def authorize_request(
        self, *, headers, operation: str
    ) -> tuple[Actor | None, list[ErrorDetail]]:
        assert operation == "subscribe_date"
        role = headers.get("x-role", "")
        if role not in {"manager", "admin", "kitchen"}:
            denied = policy_error("role not permitted", code=codes.PERMISSION_DENIED)
            return None, [denied]
        return Actor(actor_id="u1", actor_name="Ana", unit_id="Sales", role=role), []

    def authorize_unit(self, *, actor: Actor, unit_id: str) -> list[ErrorDetail]:
        return []


def _client() -> tuple[TestClient, DefaultRealtimeFanoutService]:
    hub = RealtimeHub()
    service = DefaultRealtimeFanoutService(
        settings=RealtimeFanoutSettings(),
        hub=hub,
        transport=InProcessFanoutTransport(hub=hub),
    )
    router = APIRouter()
    register_routes(router=router, service=service, authorizer=_RoleAuthorizer())
    app = FastAPI()
    app.include_router(router)
    return TestClient(app), service


def test_join_then_receive_published_lock_event() -> None:
    """A joined client should receive events published to its date."""
    client, service = _client()

    with client.websocket_connect("/realtime", headers={"X-Role": "kitchen"}) as ws:
        ws.send_json({"date": "2024-06-03"})
        joined = ws.receive_json()
        service.publish(
            meta=new_meta(kind=EnvelopeKind.EVENT, source="test", principal="admin"),
            date="2024-06-03",
            event_type=EVENT_LOCK,
            body={"date": "2024-06-03", "locked": True},
        )
        event = ws.receive_json()

    assert joined == {
        "type": "joined",
        "date": "2024-06-03",
        "channel": "room:lunch:2024-06-03",
    }
    assert event == {"type": "lock", "lock": {"date": "2024-06-03", "locked": True}}


def test_join_with_malformed_date_returns_error_message() -> None:
    """Malformed join requests should get an error frame, not a disconnect."""
    client, _service = _client()

    with client.websocket_connect("/realtime", headers={"X-Role": "manager"}) as ws:
        ws.send_json({"date": "tomorrow"})
        error = ws.receive_json()
        ws.send_text("not json")
        second = ws.receive_json()

    assert error["type"] == "error"
    assert error["code"] == codes.INVALID_ARGUMENT
    assert second["type"] == "error"


def test_unauthorized_role_is_rejected_at_connect() -> None:
    """Roles outside the read set should be closed with a policy violation."""
    client, _service = _client()

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/realtime", headers={"X-Role": "guest"}):
            pass

    assert exc_info.value.code == 1008
