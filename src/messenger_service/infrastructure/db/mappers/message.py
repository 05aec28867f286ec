from __future__ import annotations

from messenger_service.domain.entities.message import Message
from messenger_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        recipient_id=model.recipient_id,
        body=model.body,
        sent_at=model.sent_at,
        read_at=model.read_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender_id=entity.sender_id,
        recipient_id=entity.recipient_id,
        body=entity.body,
        sent_at=entity.sent_at,
        read_at=entity.read_at,
    )
