"""Fan-out transports: in-process for one instance, redis for many."""

from __future__ import annotations

from packages.canteen_shared.logging import get_logger
from resources.substrates.redis import RedisSubstrate, Subscription
from services.action.realtime_fanout.hub import RealtimeHub
from services.action.realtime_fanout.interfaces import FanoutTransport

_LOGGER = get_logger(__name__)


class InProcessFanoutTransport(FanoutTransport):
    """Dispatch straight into the local hub."""

    def __init__(self, *, hub: RealtimeHub) -> None:
        self._hub = hub

    @property
    def name(self) -> str:
        return "memory"

    def publish(self, *, channel: str, message: str) -> int:
        return self._hub.dispatch(channel, message)

    def is_ready(self) -> bool:
        return True

    def close(self) -> None:
        return None


class RedisFanoutTransport(FanoutTransport):
    """Publish through redis and dispatch every received message locally.

    A background listener pattern-subscribes to ``<prefix>:*``. Local
    subscribers receive messages only via that listener, including messages
    published by this instance.
    """

    def __init__(
        self,
        *,
        hub: RealtimeHub,
        substrate: RedisSubstrate,
        channel_prefix: str,
    ) -> None:
        self._hub = hub
        self._substrate = substrate
        self._pattern = f"{channel_prefix}:*"
        self._subscription: Subscription | None = None

    @property
    def name(self) -> str:
        return "redis"

    def start(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self._substrate.subscribe_pattern(
            pattern=self._pattern, handler=self._hub.dispatch
        )
        _LOGGER.info("Redis fan-out listener started: pattern=%s", self._pattern)

    def publish(self, *, channel: str, message: str) -> int:
        return self._substrate.publish(channel=channel, message=message)

    def is_ready(self) -> bool:
        return self._subscription is not None and self._substrate.health().ready

    def close(self) -> None:
        if self._subscription is None:
            return
        self._subscription.close()
        self._subscription = None
