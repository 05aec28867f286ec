"""Periodic keep-alive for live streams."""
from __future__ import annotations

import asyncio
import logging

from messenger_service.infrastructure.realtime.hub import PushHub

logger = logging.getLogger(__name__)


class HeartbeatTask:
    """Background task calling ``hub.heartbeat()`` every ``interval`` seconds."""

    def __init__(self, hub: PushHub, interval: float) -> None:
        self._hub = hub
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="push-hub-heartbeat")
        logger.info("Heartbeat started (every %.0fs)", self._interval)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Heartbeat stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._hub.heartbeat()
            except Exception:
                logger.exception("Heartbeat round failed")
