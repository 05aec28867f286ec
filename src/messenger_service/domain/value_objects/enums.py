from __future__ import annotations

from enum import StrEnum


class StreamEvent(StrEnum):
    CONNECTED = "connected"
    HEARTBEAT = "heartbeat"
    NEW_MESSAGE = "message.new"
    PONG = "pong"
    ERROR = "error"
