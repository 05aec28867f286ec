from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messenger_service.domain.entities.conversation import Conversation
from messenger_service.domain.value_objects.participant_key import ParticipantKey


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        """Point lookup; also returns records that were merged away."""
        ...

    async def find_by_participants(self, key: ParticipantKey) -> Conversation | None:
        """Active conversation stored under exactly this ordered pair."""
        ...

    async def list_for_participant(self, identifier: str) -> list[Conversation]:
        """Active conversations where ``identifier`` is one of the pair."""
        ...


class ConversationWriter(Protocol):
    async def create_if_absent(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert unless the pair already exists. Return (conversation, created)."""
        ...

    async def save(self, conversation: Conversation) -> None: ...
