from __future__ import annotations

from messenger_service.application.exceptions import ForbiddenError, NotFoundError
from messenger_service.domain.entities.conversation import Conversation


def assert_conversation_exists(conversation: Conversation | None) -> Conversation:
    if conversation is None:
        raise NotFoundError("Conversation not found")
    return conversation


def assert_participant(conversation: Conversation, handle: str) -> None:
    """Raise if ``handle`` is not one of the conversation's two members."""
    if not conversation.has_participant(handle):
        raise ForbiddenError("User is not part of this conversation")
