from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessageViewDTO:
    id: UUID
    conversation_id: UUID
    sender_messenger_id: str
    sender_name: str
    sender_profile_pic_url: str | None
    recipient_messenger_id: str
    body: str
    sent_at: datetime
    read_at: datetime | None
