from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol


class EventNotifier(Protocol):
    """Best-effort real-time delivery. Implementations must not raise."""

    async def notify(self, user_ids: Iterable[str], event: str, payload: dict[str, Any]) -> None: ...
