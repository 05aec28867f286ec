from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ConversationResponse(BaseModel):
    conversation_id: UUID
    other_messenger_id: str
    other_user_id: str | None
    other_user_name: str
    other_user_photo_url: str | None
    last_message_preview: str | None
    last_message_at: datetime
    has_unread: bool

    model_config = {"from_attributes": True}
