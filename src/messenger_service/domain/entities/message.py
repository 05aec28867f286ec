from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: str
    recipient_id: str
    body: str
    sent_at: datetime
    read_at: datetime | None = None
