"""Conversation lifecycle: discovery, creation, identifier migration, listing."""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from uuid import UUID

from messenger_service.application.dto.conversation import ConversationSummaryDTO
from messenger_service.application.exceptions import InvalidArgumentError, NotFoundError
from messenger_service.application.policies.permissions import assert_conversation_exists
from messenger_service.application.ports.clock import Clock, system_clock
from messenger_service.application.uow import UnitOfWork
from messenger_service.domain.entities.conversation import Conversation
from messenger_service.domain.entities.message import Message
from messenger_service.domain.entities.user import User
from messenger_service.domain.services.conversation_rules import merge_into, new_conversation
from messenger_service.domain.services.identifier_migration import (
    identifiers_of,
    normalize_conversation,
    normalize_message,
)
from messenger_service.domain.value_objects.participant_key import ParticipantKey, participant_key
from messenger_service.services import identity_service

logger = logging.getLogger(__name__)


def handle_of(user: User) -> str:
    assert user.messenger_id, "user must be resolved with a handle"
    return user.messenger_id


@dataclass(frozen=True, slots=True)
class PairLookup:
    """One way of keying a user pair when searching for their conversation."""

    name: str
    key: Callable[[User, User], ParticipantKey]


@dataclass(frozen=True, slots=True)
class ParticipantLookup:
    name: str
    identifier: Callable[[User], str]


# Tried in order; the first hit wins. Legacy and mixed keys only match records
# written before handles existed or before both users had one.
PAIR_LOOKUP_CHAIN: tuple[PairLookup, ...] = (
    PairLookup("messenger", lambda a, b: participant_key(handle_of(a), handle_of(b))),
    PairLookup("legacy", lambda a, b: participant_key(a.id, b.id)),
    PairLookup("messenger+legacy", lambda a, b: participant_key(handle_of(a), b.id)),
    PairLookup("legacy+messenger", lambda a, b: participant_key(a.id, handle_of(b))),
)

PARTICIPANT_LOOKUP_CHAIN: tuple[ParticipantLookup, ...] = (
    ParticipantLookup("messenger", handle_of),
    ParticipantLookup("legacy", lambda user: user.id),
)


async def find_by_pair(
    a: User,
    b: User,
    uow: UnitOfWork,
    chain: tuple[PairLookup, ...] = PAIR_LOOKUP_CHAIN,
) -> Conversation | None:
    """Walk ``chain`` and return the first matching conversation, normalized."""
    tried: set[ParticipantKey] = set()
    for lookup in chain:
        key = lookup.key(a, b)
        if key in tried:
            continue
        tried.add(key)
        conversation = await uow.conversations.find_by_participants(key)
        if conversation is None:
            continue
        if lookup is not chain[0]:
            logger.info("Conversation %s found by %s key %s", conversation.id, lookup.name, key)
        return await load_normalized(conversation, uow)
    return None


async def find_for_participant(
    user: User,
    uow: UnitOfWork,
    chain: tuple[ParticipantLookup, ...] = PARTICIPANT_LOOKUP_CHAIN,
) -> list[Conversation]:
    """Every conversation ``user`` takes part in under any identifier, deduplicated by id."""
    found: dict[UUID, Conversation] = {}
    for identifier in dict.fromkeys(lookup.identifier(user) for lookup in chain):
        for conversation in await uow.conversations.list_for_participant(identifier):
            found.setdefault(conversation.id, conversation)
    return list(found.values())


async def find_or_create(
    a: User,
    b: User,
    uow: UnitOfWork,
    clock: Clock = system_clock,
) -> Conversation:
    existing = await find_by_pair(a, b, uow)
    if existing is not None:
        return existing

    conversation, created = await uow.conversations_w.create_if_absent(
        new_conversation(handle_of(a), handle_of(b), clock.now()),
    )
    if created:
        logger.info(
            "Created conversation %s between %s and %s",
            conversation.id, *conversation.participant_ids,
        )
    return conversation


async def get_normalized(conversation_id: UUID, uow: UnitOfWork) -> Conversation:
    conversation = assert_conversation_exists(await uow.conversations.get_by_id(conversation_id))
    return await load_normalized(conversation, uow)


async def load_normalized(conversation: Conversation, uow: UnitOfWork) -> Conversation:
    """Upgrade stored identifiers to handles, writing only when something changed.

    If the upgraded pair already belongs to another active conversation the
    two are merged into that one instead of leaving a duplicate behind.
    """
    conversation = await _follow_merges(conversation, uow)
    mapping = await identity_service.canonical_map(identifiers_of(conversation), uow)
    normalized, changed = normalize_conversation(conversation, mapping)
    if not changed:
        return conversation

    holder = await uow.conversations.find_by_participants(normalized.participant_ids)
    if holder is not None and holder.id != conversation.id:
        holder, _ = normalize_conversation(holder, mapping)
        return await _merge(conversation, normalized, holder, mapping, uow)

    await uow.conversations_w.save(normalized)
    await normalize_messages(normalized.id, uow, known=mapping)
    logger.info(
        "Migrated conversation %s participants %s -> %s",
        conversation.id, conversation.participant_ids, normalized.participant_ids,
    )
    return normalized


async def normalize_messages(
    conversation_id: UUID,
    uow: UnitOfWork,
    *,
    known: Mapping[str, str] | None = None,
) -> list[Message]:
    """Load a conversation's messages with sender/recipient upgraded to handles.

    Changed messages are written back. Result is ordered by ``sent_at``,
    then ``id``.
    """
    messages = await uow.messages.list_for_conversation(conversation_id)
    mapping = dict(known or {})
    unknown = {i for m in messages for i in (m.sender_id, m.recipient_id)} - mapping.keys()
    if unknown:
        mapping.update(await identity_service.canonical_map(unknown, uow))

    result: list[Message] = []
    changed: list[Message] = []
    for message in messages:
        normalized, was_changed = normalize_message(message, mapping)
        result.append(normalized)
        if was_changed:
            changed.append(normalized)
    if changed:
        await uow.messages_w.save_all(changed)
        logger.debug("Rewrote identifiers on %d messages of %s", len(changed), conversation_id)

    result.sort(key=lambda m: (m.sent_at, m.id))
    return result


async def _follow_merges(conversation: Conversation, uow: UnitOfWork) -> Conversation:
    seen = {conversation.id}
    while conversation.merged_into is not None:
        target = await uow.conversations.get_by_id(conversation.merged_into)
        if target is None or target.id in seen:
            logger.error("Broken merge pointer on conversation %s", conversation.id)
            raise NotFoundError("Conversation not found")
        seen.add(target.id)
        conversation = target
    return conversation


async def _merge(
    original: Conversation,
    normalized: Conversation,
    holder: Conversation,
    mapping: Mapping[str, str],
    uow: UnitOfWork,
) -> Conversation:
    survivor = merge_into(holder, normalized)
    moved = await uow.messages_w.move_to_conversation(original.id, holder.id)
    # The absorbed record keeps its old pair so the unique key stays intact.
    await uow.conversations_w.save(replace(original, merged_into=holder.id))
    await uow.conversations_w.save(survivor)
    await normalize_messages(survivor.id, uow, known=mapping)
    logger.warning(
        "Merged conversation %s into %s for pair %s (%d messages moved)",
        original.id, holder.id, survivor.participant_ids, moved,
    )
    return survivor


async def summarize(
    conversation: Conversation,
    caller: User,
    uow: UnitOfWork,
) -> ConversationSummaryDTO:
    handle = handle_of(caller)
    other_id = conversation.other_participant(handle)
    other = await identity_service.find_user(other_id, uow)
    return ConversationSummaryDTO(
        conversation_id=conversation.id,
        other_messenger_id=(other.messenger_id if other and other.messenger_id else other_id),
        other_user_id=other.id if other else None,
        other_user_name=identity_service.display_name(other),
        other_user_photo_url=identity_service.photo_url(other),
        last_message_preview=conversation.last_message_preview,
        last_message_at=conversation.last_message_at,
        has_unread=handle in conversation.unread_by,
    )


async def list_conversations(
    caller_identifier: str,
    uow: UnitOfWork,
) -> list[ConversationSummaryDTO]:
    caller = await identity_service.resolve_with_handle(caller_identifier, uow)

    active: dict[UUID, Conversation] = {}
    for conversation in await find_for_participant(caller, uow):
        # Copy loaded before an earlier merge rewrote it.
        if conversation.id in active:
            continue
        normalized = await load_normalized(conversation, uow)
        active[normalized.id] = normalized

    ordered = sorted(active.values(), key=lambda c: c.last_message_at, reverse=True)
    summaries = [await summarize(c, caller, uow) for c in ordered]
    await uow.commit()
    return summaries


async def open_conversation(
    caller_identifier: str,
    other_identifier: str,
    uow: UnitOfWork,
    clock: Clock = system_clock,
) -> ConversationSummaryDTO:
    caller = await identity_service.resolve_with_handle(caller_identifier, uow)
    other = await identity_service.resolve_with_handle(other_identifier, uow)
    if handle_of(caller) == handle_of(other):
        raise InvalidArgumentError("Cannot open a conversation with yourself")

    conversation = await find_or_create(caller, other, uow, clock)
    summary = await summarize(conversation, caller, uow)
    await uow.commit()
    return summary
