"""redis-py backed pub/sub substrate."""

from __future__ import annotations

from typing import Any

from redis.client import PubSub

from packages.canteen_shared.logging import get_logger
from resources.substrates.redis.client import create_redis_client
from resources.substrates.redis.config import RedisSettings
from resources.substrates.redis.substrate import (
    MessageHandler,
    RedisHealthStatus,
    RedisSubstrate,
)

_LOGGER = get_logger(__name__)


class _ListenerSubscription:
    """Background ``PubSub`` worker thread bound to one pattern."""

    def __init__(self, *, pubsub: PubSub, thread: Any) -> None:
        self._pubsub = pubsub
        self._thread = thread

    def close(self) -> None:
        self._thread.stop()
        self._pubsub.close()


class RedisClientSubstrate(RedisSubstrate):
    """Concrete redis substrate using redis-py publish and pattern subscribe."""

    def __init__(self, *, settings: RedisSettings) -> None:
        self._settings = settings
        self._client = create_redis_client(settings)
        self._health_client = create_redis_client(
            settings, timeout_seconds=settings.health_timeout_seconds
        )

    def publish(self, *, channel: str, message: str) -> int:
        return int(self._client.publish(channel, message))

    def subscribe_pattern(
        self, *, pattern: str, handler: MessageHandler
    ) -> _ListenerSubscription:
        def _on_message(message: dict[str, Any]) -> None:
            channel = str(message.get("channel", ""))
            try:
                handler(channel, str(message.get("data", "")))
            except Exception:  # noqa: BLE001
                _LOGGER.warning(
                    "Redis message handler failed: channel=%s", channel, exc_info=True
                )

        def _on_listener_error(exc: BaseException, pubsub: Any, thread: Any) -> None:
            del pubsub, thread
            _LOGGER.warning(
                "Redis listener error: pattern=%s exception_type=%s",
                pattern,
                type(exc).__name__,
            )

        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        pubsub.psubscribe(**{pattern: _on_message})
        thread = pubsub.run_in_thread(
            sleep_time=self._settings.listener_poll_seconds,
            daemon=True,
            exception_handler=_on_listener_error,
        )
        return _ListenerSubscription(pubsub=pubsub, thread=thread)

    def ping(self) -> bool:
        return bool(self._health_client.ping())

    def health(self) -> RedisHealthStatus:
        """Return redis readiness and concise detail."""
        try:
            ready = self.ping()
        except Exception as exc:  # noqa: BLE001
            return RedisHealthStatus(
                ready=False,
                detail=f"redis ping failed: {type(exc).__name__}",
            )
        return RedisHealthStatus(
            ready=ready,
            detail="ok" if ready else "redis ping returned false",
        )
