"""Per-instance registry of channel subscribers."""

from __future__ import annotations

from threading import RLock

from packages.canteen_shared.logging import fields, get_logger
from services.action.realtime_fanout.interfaces import Subscriber

_LOGGER = get_logger(__name__)


class RealtimeHub:
    """Thread-safe ``channel -> subscribers`` map with non-blocking dispatch."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._channels: dict[str, set[Subscriber]] = {}

    def subscribe(self, *, channel: str, subscriber: Subscriber) -> None:
        with self._lock:
            self._channels.setdefault(channel, set()).add(subscriber)

    def unsubscribe(self, *, subscriber: Subscriber, channel: str | None = None) -> int:
        """Remove ``subscriber`` from one channel, or from all when unnamed.

        Returns the number of channels it was removed from.
        """
        with self._lock:
            names = list(self._channels) if channel is None else [channel]
            removed = 0
            for name in names:
                members = self._channels.get(name)
                if members is None or subscriber not in members:
                    continue
                members.discard(subscriber)
                removed += 1
                if not members:
                    del self._channels[name]
            return removed

    def subscriber_count(self, channel: str | None = None) -> int:
        with self._lock:
            if channel is not None:
                return len(self._channels.get(channel, ()))
            unique: set[Subscriber] = set()
            for members in self._channels.values():
                unique.update(members)
            return len(unique)

    def dispatch(self, channel: str, message: str) -> int:
        """Deliver one message to the channel's current subscribers.

        Delivery happens outside the lock. Returns the accepted delivery count.
        """
        with self._lock:
            members = tuple(self._channels.get(channel, ()))
        delivered = 0
        for subscriber in members:
            try:
                accepted = subscriber.deliver(message)
            except Exception:  # noqa: BLE001
                _LOGGER.warning(
                    "Subscriber delivery failed",
                    extra={fields.CHANNEL: channel},
                    exc_info=True,
                )
                continue
            if accepted:
                delivered += 1
        return delivered
