from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from messenger_service.domain.entities.conversation import Conversation
from messenger_service.domain.value_objects.participant_key import ParticipantKey
from messenger_service.infrastructure.db.mappers import conversation as mapper
from messenger_service.infrastructure.db.models.conversation import ConversationModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def find_by_participants(self, key: ParticipantKey) -> Conversation | None:
        low, high = key
        stmt = select(ConversationModel).where(
            ConversationModel.participant_low == low,
            ConversationModel.participant_high == high,
            ConversationModel.merged_into.is_(None),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_participant(self, identifier: str) -> list[Conversation]:
        stmt = (
            select(ConversationModel)
            .where(
                or_(
                    ConversationModel.participant_low == identifier,
                    ConversationModel.participant_high == identifier,
                ),
                ConversationModel.merged_into.is_(None),
            )
            .order_by(ConversationModel.last_message_at.desc(), ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_absent(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert unless the participant pair is taken. Returns (conversation, created)."""
        stmt = (
            pg_insert(ConversationModel)
            .values(**mapper.entity_to_values(conversation))
            .on_conflict_do_nothing(constraint="uq_conversation_participants")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            return mapper.model_to_entity(row), True

        # Conflict: a concurrent request created the pair first.
        low, high = conversation.participant_ids
        existing = await self._session.execute(
            select(ConversationModel).where(
                ConversationModel.participant_low == low,
                ConversationModel.participant_high == high,
            )
        )
        model = existing.scalar_one()
        return mapper.model_to_entity(model), False

    async def save(self, conversation: Conversation) -> None:
        values = mapper.entity_to_values(conversation)
        del values["id"]
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation.id)
            .values(**values)
        )
        await self._session.execute(stmt)
