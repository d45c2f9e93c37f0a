"""Authoritative in-process Python API for Realtime Fan-out Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Mapping

from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.redis import RedisSubstrate
from services.action.realtime_fanout.domain import (
    HealthStatus,
    PublishReceipt,
    SubscriptionInfo,
)
from services.action.realtime_fanout.interfaces import Subscriber


class RealtimeFanoutService(ABC):
    """Public API for date-scoped realtime broadcast."""

    @abstractmethod
    def publish(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        event_type: str,
        body: Mapping[str, object],
    ) -> Envelope[PublishReceipt]:
        """Broadcast one event to every subscriber of the date's channel."""

    @abstractmethod
    def subscribe(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        subscriber: Subscriber,
    ) -> Envelope[SubscriptionInfo]:
        """Join ``subscriber`` to the date's channel."""

    @abstractmethod
    def unsubscribe(self, *, subscriber: Subscriber) -> int:
        """Remove ``subscriber`` from every channel it joined."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return fan-out and backplane readiness."""

    @abstractmethod
    def close(self) -> None:
        """Stop backplane listeners."""


def build_realtime_fanout_service(
    *,
    settings: CanteenSettings,
    redis: RedisSubstrate | None = None,
) -> RealtimeFanoutService:
    """Build the default fan-out service with the configured backplane."""
    from resources.substrates.redis import RedisClientSubstrate, resolve_redis_settings
    from services.action.realtime_fanout.config import (
        resolve_realtime_fanout_settings,
    )
    from services.action.realtime_fanout.hub import RealtimeHub
    from services.action.realtime_fanout.implementation import (
        DefaultRealtimeFanoutService,
    )
    from services.action.realtime_fanout.interfaces import FanoutTransport
    from services.action.realtime_fanout.transports import (
        InProcessFanoutTransport,
        RedisFanoutTransport,
    )

    fanout_settings = resolve_realtime_fanout_settings(settings)
    hub = RealtimeHub()
    transport: FanoutTransport
    if fanout_settings.backplane == "redis":
        redis_transport = RedisFanoutTransport(
            hub=hub,
            substrate=redis
            or RedisClientSubstrate(settings=resolve_redis_settings(settings)),
            channel_prefix=fanout_settings.channel_prefix,
        )
        redis_transport.start()
        transport = redis_transport
    else:
        transport = InProcessFanoutTransport(hub=hub)

    return DefaultRealtimeFanoutService(
        settings=fanout_settings,
        hub=hub,
        transport=transport,
    )
