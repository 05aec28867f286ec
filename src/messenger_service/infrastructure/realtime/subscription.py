from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Transport end of a live stream; a ``WebSocket`` satisfies it."""

    async def send_text(self, data: str) -> None: ...


class SubscriptionClosedError(RuntimeError):
    pass


class Subscription:
    """One open client stream for one user.

    Goes from open to closed exactly once; ``close`` may be called any number
    of times from any path (client disconnect, failed write, shutdown).
    """

    def __init__(self, user_id: str, sink: EventSink) -> None:
        self.id = uuid.uuid4().hex
        self.user_id = user_id
        self._sink = sink
        self._closed = False
        self._on_close: list[Callable[[Subscription], None]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def on_close(self, callback: Callable[[Subscription], None]) -> None:
        self._on_close.append(callback)

    async def send(self, raw: str) -> None:
        if self._closed:
            raise SubscriptionClosedError(f"subscription {self.id} is closed")
        await self._sink.send_text(raw)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for callback in self._on_close:
            try:
                callback(self)
            except Exception:
                logger.exception("Close callback failed for subscription %s", self.id)
        self._on_close.clear()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Subscription {self.id} user={self.user_id} {state}>"
