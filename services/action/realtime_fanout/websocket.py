"""WebSocket-backed subscriber with a bounded per-client buffer."""

from __future__ import annotations

import asyncio

from packages.canteen_shared.logging import get_logger

_LOGGER = get_logger(__name__)


class QueueSubscriber:
    """Hand messages to one client's event loop without blocking the publisher.

    Publishers run on worker threads or the redis listener thread, so delivery
    goes through ``call_soon_threadsafe``. A full buffer drops the message.
    """

    def __init__(self, *, loop: asyncio.AbstractEventLoop, maxsize: int) -> None:
        self._loop = loop
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def deliver(self, message: str) -> bool:
        if self._loop.is_closed():
            return False
        try:
            self._loop.call_soon_threadsafe(self._enqueue, message)
        except RuntimeError:
            return False
        return True

    async def next_message(self) -> str:
        return await self._queue.get()

    def _enqueue(self, message: str) -> None:
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped += 1
            _LOGGER.warning(
                "Subscriber buffer full; message dropped: dropped_total=%d",
                self.dropped,
            )
