"""Transport-neutral protocols used by Realtime Fan-out Service."""

from __future__ import annotations

from typing import Protocol


class Subscriber(Protocol):
    """One connected client able to receive channel messages."""

    def deliver(self, message: str) -> bool:
        """Hand off one message without blocking; return ``False`` if dropped."""


class FanoutTransport(Protocol):
    """Carries published messages to every instance's local hub."""

    @property
    def name(self) -> str:
        """Return the backplane name reported by health checks."""

    def publish(self, *, channel: str, message: str) -> int:
        """Publish one message and return the receiver count."""

    def is_ready(self) -> bool:
        """Return whether the transport can currently publish."""

    def close(self) -> None:
        """Release listener threads and connections."""
