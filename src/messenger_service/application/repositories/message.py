from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from messenger_service.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_for_conversation(self, conversation_id: UUID) -> list[Message]:
        """All messages, ordered by ``sent_at`` then ``id``."""
        ...

    async def list_unread(
        self,
        conversation_id: UUID,
        recipient_ids: Sequence[str],
    ) -> list[Message]: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def save_all(self, messages: Sequence[Message]) -> None: ...

    async def move_to_conversation(self, source_id: UUID, target_id: UUID) -> int:
        """Re-point every message of ``source_id``; returns the count moved."""
        ...
