from __future__ import annotations

import logging
import uuid

from messenger_service.application.dto.message import MessageViewDTO
from messenger_service.application.exceptions import InvalidArgumentError
from messenger_service.application.policies.permissions import assert_participant
from messenger_service.application.ports.clock import Clock, system_clock
from messenger_service.application.ports.notifier import EventNotifier
from messenger_service.application.uow import UnitOfWork
from messenger_service.domain.entities.conversation import Conversation
from messenger_service.domain.entities.message import Message
from messenger_service.domain.entities.user import User
from messenger_service.domain.events.message_created import MessageCreated
from messenger_service.domain.services.conversation_rules import apply_message
from messenger_service.domain.value_objects.enums import StreamEvent
from messenger_service.services import conversation_service, identity_service
from messenger_service.services.conversation_service import handle_of

logger = logging.getLogger(__name__)


def _to_view(message: Message, sender: User | None) -> MessageViewDTO:
    return MessageViewDTO(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_messenger_id=message.sender_id,
        sender_name=identity_service.display_name(sender),
        sender_profile_pic_url=identity_service.photo_url(sender),
        recipient_messenger_id=message.recipient_id,
        body=message.body,
        sent_at=message.sent_at,
        read_at=message.read_at,
    )


async def _decorate(messages: list[Message], uow: UnitOfWork) -> list[MessageViewDTO]:
    senders: dict[str, User | None] = {}
    views = []
    for message in messages:
        if message.sender_id not in senders:
            senders[message.sender_id] = await identity_service.find_user(message.sender_id, uow)
        views.append(_to_view(message, senders[message.sender_id]))
    return views


async def _messages_for(
    conversation: Conversation,
    caller: User,
    uow: UnitOfWork,
) -> list[MessageViewDTO]:
    assert_participant(conversation, handle_of(caller))
    messages = await conversation_service.normalize_messages(conversation.id, uow)
    views = await _decorate(messages, uow)
    await uow.commit()
    return views


async def get_messages(
    caller_identifier: str,
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
) -> list[MessageViewDTO]:
    """All messages of a conversation, oldest first (ties broken by id)."""
    conversation = await conversation_service.get_normalized(conversation_id, uow)
    caller = await identity_service.resolve_with_handle(caller_identifier, uow)
    return await _messages_for(conversation, caller, uow)


async def get_messages_with_user(
    caller_identifier: str,
    other_identifier: str,
    uow: UnitOfWork,
) -> list[MessageViewDTO]:
    caller = await identity_service.resolve_with_handle(caller_identifier, uow)
    other = await identity_service.resolve_with_handle(other_identifier, uow)
    conversation = await conversation_service.find_by_pair(caller, other, uow)
    if conversation is None:
        await uow.commit()
        return []
    return await _messages_for(conversation, caller, uow)


async def send_message(
    caller_identifier: str,
    conversation_id: uuid.UUID | None,
    recipient_identifier: str | None,
    body: str | None,
    uow: UnitOfWork,
    notifier: EventNotifier,
    clock: Clock = system_clock,
) -> MessageViewDTO:
    text = (body or "").strip()
    if not text:
        raise InvalidArgumentError("Message body must not be empty")
    if not (recipient_identifier or "").strip():
        raise InvalidArgumentError("recipient_messenger_id is required")

    sender = await identity_service.resolve_with_handle(caller_identifier, uow)
    recipient = await identity_service.resolve_with_handle(recipient_identifier, uow)
    sender_id, recipient_id = handle_of(sender), handle_of(recipient)
    if sender_id == recipient_id:
        raise InvalidArgumentError("Cannot send a message to yourself")

    if conversation_id is not None:
        conversation = await conversation_service.get_normalized(conversation_id, uow)
    else:
        conversation = await conversation_service.find_or_create(sender, recipient, uow, clock)

    assert_participant(conversation, sender_id)
    if not conversation.has_participant(recipient_id):
        raise InvalidArgumentError("Recipient is not part of this conversation")

    message = await uow.messages_w.create(
        Message(
            id=uuid.uuid4(),
            conversation_id=conversation.id,
            sender_id=sender_id,
            recipient_id=recipient_id,
            body=text,
            sent_at=clock.now(),
        )
    )
    # Not serialized against concurrent sends: the last writer's summary wins.
    await uow.conversations_w.save(apply_message(conversation, message))
    await uow.commit()

    event = MessageCreated(
        message_id=message.id,
        conversation_id=message.conversation_id,
        sender_id=sender_id,
        sender_name=sender.display_name,
        sender_photo_url=sender.photo_url,
        recipient_id=recipient_id,
        body=message.body,
        sent_at=message.sent_at,
    )
    try:
        await notifier.notify([recipient_id], StreamEvent.NEW_MESSAGE, event.to_payload())
    except Exception:
        logger.warning("Live delivery of message %s failed", message.id, exc_info=True)

    return _to_view(message, sender)
