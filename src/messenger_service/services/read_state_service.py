from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from messenger_service.application.policies.permissions import assert_participant
from messenger_service.application.ports.clock import Clock, system_clock
from messenger_service.application.uow import UnitOfWork
from messenger_service.domain.services.conversation_rules import mark_read_by
from messenger_service.domain.services.identifier_migration import canonical
from messenger_service.services import conversation_service, identity_service
from messenger_service.services.conversation_service import handle_of

logger = logging.getLogger(__name__)


async def mark_read(
    caller_identifier: str,
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
    clock: Clock = system_clock,
) -> int:
    """Stamp every unread message addressed to the caller and clear their unread flag.

    Returns the number of messages stamped.
    """
    conversation = await conversation_service.get_normalized(conversation_id, uow)
    caller = await identity_service.resolve_with_handle(caller_identifier, uow)
    handle = handle_of(caller)
    assert_participant(conversation, handle)

    unread = await uow.messages.list_unread(conversation.id, list(dict.fromkeys([handle, caller.id])))
    now = clock.now()
    mapping = {caller.id: handle}
    stamped = [
        replace(
            m,
            recipient_id=canonical(m.recipient_id, mapping),
            read_at=now,
        )
        for m in unread
    ]
    if stamped:
        await uow.messages_w.save_all(stamped)

    await uow.conversations_w.save(mark_read_by(conversation, handle))
    await uow.commit()
    logger.debug("Marked %d messages read in %s for %s", len(stamped), conversation.id, handle)
    return len(stamped)
