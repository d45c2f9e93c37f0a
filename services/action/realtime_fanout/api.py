"""FastAPI WebSocket route for date-scoped realtime subscriptions."""

from __future__ import annotations

import asyncio
import contextlib
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from packages.canteen_shared.envelope import EnvelopeKind, new_meta
from packages.canteen_shared.identity import Actor, RequestAuthorizer
from packages.canteen_shared.logging import fields, get_logger
from services.action.realtime_fanout.implementation import DefaultRealtimeFanoutService
from services.action.realtime_fanout.service import RealtimeFanoutService
from services.action.realtime_fanout.websocket import QueueSubscriber

SUBSCRIBE_OPERATION = "subscribe_date"
DEFAULT_QUEUE_SIZE = 100

_LOGGER = get_logger(__name__)


def register_routes(
    *,
    router: APIRouter,
    service: RealtimeFanoutService,
    authorizer: RequestAuthorizer,
) -> None:
    """Register ``WS /realtime`` on ``router``."""
    queue_size = DEFAULT_QUEUE_SIZE
    if isinstance(service, DefaultRealtimeFanoutService):
        queue_size = service.settings.subscriber_queue_size

    @router.websocket("/realtime")
    async def realtime(websocket: WebSocket) -> None:
        actor, errors = authorizer.authorize_request(
            headers=websocket.headers, operation=SUBSCRIBE_OPERATION
        )
        if errors or actor is None:
            reason = errors[0].message if errors else "unauthorized"
            _LOGGER.info("Realtime subscription rejected: reason=%s", reason)
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=reason)
            return

        await websocket.accept()
        subscriber = QueueSubscriber(
            loop=asyncio.get_running_loop(), maxsize=queue_size
        )
        pump = asyncio.create_task(_pump(websocket, subscriber))
        try:
            while True:
                raw = await websocket.receive_text()
                await _handle_join(
                    websocket=websocket,
                    service=service,
                    actor=actor,
                    subscriber=subscriber,
                    raw=raw,
                )
        except WebSocketDisconnect:
            pass
        finally:
            pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pump
            service.unsubscribe(subscriber=subscriber)


async def _handle_join(
    *,
    websocket: WebSocket,
    service: RealtimeFanoutService,
    actor: Actor,
    subscriber: QueueSubscriber,
    raw: str,
) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        await websocket.send_json({"type": "error", "message": "message must be JSON"})
        return
    if not isinstance(message, dict) or "date" not in message:
        await websocket.send_json({"type": "error", "message": "date is required"})
        return

    result = service.subscribe(
        meta=new_meta(
            kind=EnvelopeKind.COMMAND,
            source="websocket",
            principal=actor.actor_id,
        ),
        date=message["date"],
        subscriber=subscriber,
    )
    error = result.first_error
    if error is not None or result.value is None:
        await websocket.send_json(
            {
                "type": "error",
                "code": error.code if error else "",
                "message": error.message if error else "",
            }
        )
        return

    joined = result.value
    _LOGGER.info(
        "Realtime client joined",
        extra={fields.CHANNEL: joined.channel, fields.ROLE: actor.role},
    )
    await websocket.send_json(
        {"type": "joined", "date": joined.date.isoformat(), "channel": joined.channel}
    )


async def _pump(websocket: WebSocket, subscriber: QueueSubscriber) -> None:
    while True:
        message = await subscriber.next_message()
        try:
            await websocket.send_text(message)
        except (WebSocketDisconnect, RuntimeError):
            return
