from __future__ import annotations

from typing import Protocol

from messenger_service.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from messenger_service.application.repositories.message import MessageReader, MessageWriter
from messenger_service.application.repositories.user import UserReader, UserWriter


class UnitOfWork(Protocol):
    users: UserReader
    users_w: UserWriter
    conversations: ConversationReader
    conversations_w: ConversationWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
