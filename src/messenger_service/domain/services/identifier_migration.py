"""Lazy migration of legacy user identifiers to messenger handles.

Stored conversations and messages may still reference users by their legacy
internal id. The functions here are pure: given a mapping from any known
identifier to its canonical handle they return the rewritten record and a
flag telling the caller whether a write is needed. Identifiers missing from
the mapping are kept as they are.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from messenger_service.domain.entities.conversation import Conversation
from messenger_service.domain.entities.message import Message
from messenger_service.domain.value_objects.participant_key import participant_key


def canonical(identifier: str, mapping: Mapping[str, str]) -> str:
    return mapping.get(identifier, identifier)


def identifiers_of(conversation: Conversation) -> set[str]:
    return {*conversation.participant_ids, *conversation.unread_by}


def normalize_unread(
    unread_by: Iterable[str],
    participants: tuple[str, str],
    mapping: Mapping[str, str],
) -> tuple[str, ...]:
    """Map, de-duplicate (first occurrence wins) and clamp to participants."""
    result: list[str] = []
    for identifier in unread_by:
        value = canonical(identifier, mapping)
        if value in participants and value not in result:
            result.append(value)
    return tuple(result)


def normalize_conversation(
    conversation: Conversation,
    mapping: Mapping[str, str],
) -> tuple[Conversation, bool]:
    first, second = conversation.participant_ids
    participants = participant_key(canonical(first, mapping), canonical(second, mapping))
    unread_by = normalize_unread(conversation.unread_by, participants, mapping)

    if participants == conversation.participant_ids and unread_by == conversation.unread_by:
        return conversation, False
    return replace(conversation, participant_ids=participants, unread_by=unread_by), True


def normalize_message(
    message: Message,
    mapping: Mapping[str, str],
) -> tuple[Message, bool]:
    sender_id = canonical(message.sender_id, mapping)
    recipient_id = canonical(message.recipient_id, mapping)
    if sender_id == message.sender_id and recipient_id == message.recipient_id:
        return message, False
    return replace(message, sender_id=sender_id, recipient_id=recipient_id), True
