"""State transitions on a conversation's summary fields."""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from uuid import UUID, uuid4

from messenger_service.domain.entities.conversation import Conversation
from messenger_service.domain.entities.message import Message
from messenger_service.domain.value_objects.participant_key import participant_key

GREETING_PREVIEW = "Say hello"
PREVIEW_MAX_LENGTH = 80
ELLIPSIS = "…"


def truncate_preview(body: str, max_length: int = PREVIEW_MAX_LENGTH) -> str:
    if len(body) <= max_length:
        return body
    return body[:max_length] + ELLIPSIS


def new_conversation(
    a: str,
    b: str,
    now: datetime,
    *,
    conversation_id: UUID | None = None,
) -> Conversation:
    return Conversation(
        id=conversation_id or uuid4(),
        participant_ids=participant_key(a, b),
        created_at=now,
        last_message_at=now,
        last_message_preview=GREETING_PREVIEW,
        unread_by=(),
    )


def apply_message(conversation: Conversation, message: Message) -> Conversation:
    """Record ``message`` as the latest one: the sender has read everything,
    the recipient has something unread."""
    unread = [i for i in conversation.unread_by if i != message.sender_id]
    if message.recipient_id not in unread:
        unread.append(message.recipient_id)
    return replace(
        conversation,
        last_message_at=message.sent_at,
        last_message_preview=truncate_preview(message.body),
        unread_by=tuple(unread),
    )


def mark_read_by(conversation: Conversation, identifier: str) -> Conversation:
    if identifier not in conversation.unread_by:
        return conversation
    return replace(
        conversation,
        unread_by=tuple(i for i in conversation.unread_by if i != identifier),
    )


def merge_into(survivor: Conversation, absorbed: Conversation) -> Conversation:
    """Fold ``absorbed``'s summary into ``survivor``.

    Both must already carry the same participant pair. The newest message
    summary wins, the oldest creation time is kept and unread flags are
    united.
    """
    latest = absorbed if absorbed.last_message_at > survivor.last_message_at else survivor
    unread = list(survivor.unread_by)
    for identifier in absorbed.unread_by:
        if identifier in survivor.participant_ids and identifier not in unread:
            unread.append(identifier)
    return replace(
        survivor,
        created_at=min(survivor.created_at, absorbed.created_at),
        last_message_at=latest.last_message_at,
        last_message_preview=latest.last_message_preview,
        unread_by=tuple(unread),
    )
