"""Seed development data: two users and a short legacy-keyed conversation.

The users start without messenger handles and the conversation references
their internal ids, so the first API call exercises the identifier upgrade.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from messenger_service.config import settings
from messenger_service.domain.entities.message import Message
from messenger_service.domain.services.conversation_rules import apply_message, new_conversation
from messenger_service.infrastructure.db.models.user import UserModel
from messenger_service.infrastructure.db.session import AsyncSessionLocal, engine
from messenger_service.infrastructure.db.uow import SqlAlchemyUoW
from messenger_service.log_config import configure_logging

logger = logging.getLogger(__name__)

ALICE_ID = "64f1c0a1e4b0a1a1a1a1a1a1"
BOB_ID = "64f1c0a1e4b0b2b2b2b2b2b2"


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        session.add_all([
            UserModel(id=ALICE_ID, first_name="Alice", last_name="Liddell"),
            UserModel(id=BOB_ID, first_name="Bob", last_name="Builder"),
        ])
        await session.flush()

        uow = SqlAlchemyUoW(session)
        start = datetime.now(timezone.utc) - timedelta(minutes=10)
        conversation, _ = await uow.conversations_w.create_if_absent(
            new_conversation(ALICE_ID, BOB_ID, start),
        )

        lines = [
            (ALICE_ID, BOB_ID, "Hi Bob! Are you coming on Saturday?"),
            (BOB_ID, ALICE_ID, "Hey! Yes, I'll bring snacks."),
            (ALICE_ID, BOB_ID, "Perfect, see you there."),
        ]
        for offset, (sender, recipient, body) in enumerate(lines, start=1):
            message = await uow.messages_w.create(
                Message(
                    id=uuid.uuid4(),
                    conversation_id=conversation.id,
                    sender_id=sender,
                    recipient_id=recipient,
                    body=body,
                    sent_at=start + timedelta(minutes=offset),
                )
            )
            conversation = apply_message(conversation, message)
        await uow.conversations_w.save(conversation)

        await uow.commit()
        logger.info("Seeded conversation %s with %d messages", conversation.id, len(lines))
    await engine.dispose()


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
