from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status

from messenger_service.api.deps import CurrentPrincipal, UoWDep
from messenger_service.api.v1.schemas.conversation import ConversationResponse
from messenger_service.api.v1.schemas.message import MessageResponse
from messenger_service.services import conversation_service, message_service, read_state_service

router = APIRouter(prefix="/api/v1/messages/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationResponse]:
    summaries = await conversation_service.list_conversations(principal.subject, uow)
    return [ConversationResponse.model_validate(s) for s in summaries]


@router.post("/{other_id}", response_model=ConversationResponse)
async def open_conversation(
    other_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    summary = await conversation_service.open_conversation(principal.subject, other_id, uow)
    return ConversationResponse.model_validate(summary)


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.get_messages(principal.subject, conversation_id, uow)
    return [MessageResponse.model_validate(m) for m in messages]


@router.patch("/{conversation_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> Response:
    await read_state_service.mark_read(principal.subject, conversation_id, uow)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
