"""In-process registry of live client streams keyed by user."""
from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Iterable
from typing import Any

from messenger_service.domain.value_objects.enums import StreamEvent
from messenger_service.infrastructure.realtime.protocol import StreamOutbound
from messenger_service.infrastructure.realtime.subscription import EventSink, Subscription

logger = logging.getLogger(__name__)


class PushHub:
    """Fans events out to every open subscription of a user.

    The registry maps a user id to a frozenset that is replaced, never
    mutated, under ``_lock``. Fan-out iterates a snapshot, so subscriptions
    closing mid-loop cannot invalidate it. Delivery is best effort: a failed
    write closes that subscription and nothing is raised to the caller.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._registry: dict[str, frozenset[Subscription]] = {}
        self._event_ids = itertools.count(1)

    async def subscribe(self, user_id: str, sink: EventSink) -> Subscription:
        subscription = Subscription(user_id, sink)
        subscription.on_close(self._unregister)
        with self._lock:
            self._registry[user_id] = self._registry.get(user_id, frozenset()) | {subscription}
        logger.debug("Subscribed %r (user total=%d)", subscription, self.connection_count(user_id))

        await self._deliver([subscription], StreamEvent.CONNECTED, "ok")
        return subscription

    def _unregister(self, subscription: Subscription) -> None:
        with self._lock:
            current = self._registry.get(subscription.user_id)
            if current is None or subscription not in current:
                return
            remaining = current - {subscription}
            if remaining:
                self._registry[subscription.user_id] = remaining
            else:
                del self._registry[subscription.user_id]
        logger.debug("Unsubscribed %r", subscription)

    def _snapshot(self, user_id: str) -> frozenset[Subscription]:
        with self._lock:
            return self._registry.get(user_id, frozenset())

    def _next_event_id(self) -> int:
        with self._lock:
            return next(self._event_ids)

    def connection_count(self, user_id: str | None = None) -> int:
        with self._lock:
            if user_id is not None:
                return len(self._registry.get(user_id, ()))
            return sum(len(subs) for subs in self._registry.values())

    async def publish(self, user_id: str, event: str, payload: Any) -> int:
        """Send ``event`` to all of the user's subscriptions; returns deliveries."""
        subscriptions = self._snapshot(user_id)
        if not subscriptions:
            return 0
        return await self._deliver(subscriptions, event, payload)

    async def publish_to_many(self, user_ids: Iterable[str], event: str, payload: Any) -> int:
        delivered = 0
        for user_id in user_ids:
            delivered += await self.publish(user_id, event, payload)
        return delivered

    async def heartbeat(self) -> int:
        """Ping every open subscription so idle proxies keep the stream alive."""
        with self._lock:
            everyone = [sub for subs in self._registry.values() for sub in subs]
        if not everyone:
            return 0
        return await self._deliver(everyone, StreamEvent.HEARTBEAT, "ping")

    def close_all(self) -> None:
        with self._lock:
            everyone = [sub for subs in self._registry.values() for sub in subs]
        for subscription in everyone:
            subscription.close()
        if everyone:
            logger.info("Closed %d live subscriptions", len(everyone))

    async def _deliver(
        self,
        subscriptions: Iterable[Subscription],
        event: str,
        payload: Any,
    ) -> int:
        raw = StreamOutbound(
            type=str(event), id=self._next_event_id(), data=payload,
        ).model_dump_json()
        delivered = 0
        dead: list[Subscription] = []
        for subscription in subscriptions:
            try:
                await subscription.send(raw)
                delivered += 1
            except Exception:
                dead.append(subscription)
        for subscription in dead:
            logger.debug("Dropping dead %r after failed %s", subscription, event)
            subscription.close()
        return delivered
