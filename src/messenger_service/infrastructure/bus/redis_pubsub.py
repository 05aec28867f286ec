"""Redis Pub/Sub subscriber relaying fan-out events into the local hub."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

from messenger_service.infrastructure.bus.serializer import FanoutEnvelope
from messenger_service.infrastructure.realtime.hub import PushHub

logger = logging.getLogger(__name__)

OnEventCallback = Callable[[FanoutEnvelope], Coroutine[Any, Any, None]]


class RedisPubSubSubscriber:
    """Background task that listens to a Redis channel and dispatches events."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEventCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-fanout-subscriber")
        logger.info("Redis fan-out subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Redis fan-out subscriber stopped")

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    await self._callback(FanoutEnvelope.decode(message["data"]))
                except Exception:
                    logger.exception("Error relaying fan-out message")
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()


def relay_to_hub(hub: PushHub) -> OnEventCallback:
    """Callback delivering every relayed envelope to the local ``hub``."""

    async def _relay(envelope: FanoutEnvelope) -> None:
        await hub.publish_to_many(envelope.user_ids, envelope.event, envelope.payload)

    return _relay
