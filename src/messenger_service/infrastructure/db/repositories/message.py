from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from messenger_service.domain.entities.message import Message
from messenger_service.infrastructure.db.mappers import message as mapper
from messenger_service.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_conversation(self, conversation_id: UUID) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.sent_at.asc(), MessageModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_unread(
        self,
        conversation_id: UUID,
        recipient_ids: Sequence[str],
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.recipient_id.in_(recipient_ids),
                MessageModel.read_at.is_(None),
            )
            .order_by(MessageModel.sent_at.asc(), MessageModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def save_all(self, messages: Sequence[Message]) -> None:
        if not messages:
            return
        # ORM bulk UPDATE by primary key.
        await self._session.execute(
            update(MessageModel),
            [
                {
                    "id": m.id,
                    "conversation_id": m.conversation_id,
                    "sender_id": m.sender_id,
                    "recipient_id": m.recipient_id,
                    "read_at": m.read_at,
                }
                for m in messages
            ],
        )

    async def move_to_conversation(self, source_id: UUID, target_id: UUID) -> int:
        stmt = (
            update(MessageModel)
            .where(MessageModel.conversation_id == source_id)
            .values(conversation_id=target_id)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
