"""Transport-agnostic contract for redis pub/sub operations."""

from __future__ import annotations

from typing import Callable, Protocol

from pydantic import BaseModel, ConfigDict

MessageHandler = Callable[[str, str], None]


class RedisHealthStatus(BaseModel):
    """Redis substrate readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str


class Subscription(Protocol):
    """Handle for one running pattern subscription."""

    def close(self) -> None:
        """Stop receiving messages and release the connection."""


class RedisSubstrate(Protocol):
    """Protocol for redis publish and pattern-subscribe operations."""

    def publish(self, *, channel: str, message: str) -> int:
        """Publish one message and return the receiving subscriber count."""

    def subscribe_pattern(
        self, *, pattern: str, handler: MessageHandler
    ) -> Subscription:
        """Deliver every message on channels matching ``pattern`` to ``handler``."""

    def ping(self) -> bool:
        """Return substrate liveness from redis ``PING``."""

    def health(self) -> RedisHealthStatus:
        """Probe redis readiness and detail."""
