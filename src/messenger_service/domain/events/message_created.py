from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessageCreated:
    message_id: UUID
    conversation_id: UUID
    sender_id: str
    sender_name: str
    sender_photo_url: str | None
    recipient_id: str
    body: str
    sent_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "conversation_id": str(self.conversation_id),
            "message": {
                "id": str(self.message_id),
                "conversation_id": str(self.conversation_id),
                "sender_messenger_id": self.sender_id,
                "sender_name": self.sender_name,
                "sender_profile_pic_url": self.sender_photo_url,
                "recipient_messenger_id": self.recipient_id,
                "body": self.body,
                "sent_at": self.sent_at.isoformat(),
                "read_at": None,
            },
        }
