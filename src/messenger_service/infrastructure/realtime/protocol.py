"""Live stream envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class StreamInbound(BaseModel):
    """Client → Server."""

    type: str  # ping
    data: dict[str, Any] = {}


class StreamOutbound(BaseModel):
    """Server → Client."""

    type: str  # connected | heartbeat | message.new | pong | error
    id: int | None = None
    data: Any = None
