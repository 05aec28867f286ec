from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class SendMessageRequest(BaseModel):
    conversation_id: UUID | None = None
    recipient_messenger_id: str | None = None
    # Legacy clients address the recipient by internal user id.
    recipient_id: str | None = None
    body: str

    def resolve_recipient(self) -> str | None:
        for candidate in (self.recipient_messenger_id, self.recipient_id):
            if candidate and candidate.strip():
                return candidate.strip()
        return None


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_messenger_id: str
    sender_name: str
    sender_profile_pic_url: str | None
    recipient_messenger_id: str
    body: str
    sent_at: datetime
    read_at: datetime | None

    model_config = {"from_attributes": True}
