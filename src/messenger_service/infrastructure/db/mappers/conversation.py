from __future__ import annotations

from messenger_service.domain.entities.conversation import Conversation
from messenger_service.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        participant_ids=(model.participant_low, model.participant_high),
        created_at=model.created_at,
        last_message_at=model.last_message_at,
        last_message_preview=model.last_message_preview,
        unread_by=tuple(model.unread_by or ()),
        merged_into=model.merged_into,
    )


def entity_to_values(entity: Conversation) -> dict:
    low, high = entity.participant_ids
    return {
        "id": entity.id,
        "participant_low": low,
        "participant_high": high,
        "created_at": entity.created_at,
        "last_message_at": entity.last_message_at,
        "last_message_preview": entity.last_message_preview,
        "unread_by": list(entity.unread_by),
        "merged_into": entity.merged_into,
    }
