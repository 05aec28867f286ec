from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    participant_ids: tuple[str, str]
    created_at: datetime
    last_message_at: datetime
    last_message_preview: str | None
    unread_by: tuple[str, ...] = ()
    merged_into: UUID | None = None

    def has_participant(self, identifier: str) -> bool:
        return identifier in self.participant_ids

    def other_participant(self, identifier: str) -> str:
        for participant in self.participant_ids:
            if participant != identifier:
                return participant
        return identifier
