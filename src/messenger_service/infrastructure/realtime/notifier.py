from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import redis.asyncio as aioredis

from messenger_service.infrastructure.bus.serializer import FanoutEnvelope
from messenger_service.infrastructure.realtime.hub import PushHub

logger = logging.getLogger(__name__)


class HubNotifier:
    """Deliver straight to this process's hub (single worker)."""

    def __init__(self, hub: PushHub) -> None:
        self._hub = hub

    async def notify(self, user_ids: Iterable[str], event: str, payload: dict[str, Any]) -> None:
        await self._hub.publish_to_many(user_ids, event, payload)


class RedisFanoutNotifier:
    """Relay through Redis Pub/Sub so streams held by any worker receive it."""

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def notify(self, user_ids: Iterable[str], event: str, payload: dict[str, Any]) -> None:
        raw = FanoutEnvelope(event=str(event), user_ids=list(user_ids), payload=payload).encode()
        try:
            await self._redis.publish(self._channel, raw)
        except Exception:
            logger.warning("Failed to relay %s via %s", event, self._channel, exc_info=True)
