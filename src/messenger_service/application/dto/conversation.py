from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ConversationSummaryDTO:
    conversation_id: UUID
    other_messenger_id: str
    other_user_id: str | None
    other_user_name: str
    other_user_photo_url: str | None
    last_message_preview: str | None
    last_message_at: datetime
    has_unread: bool
