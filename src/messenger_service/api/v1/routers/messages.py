from __future__ import annotations

from fastapi import APIRouter

from messenger_service.api.deps import CurrentPrincipal, NotifierDep, UoWDep
from messenger_service.api.v1.schemas.message import MessageResponse, SendMessageRequest
from messenger_service.services import message_service

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    notifier: NotifierDep,
) -> MessageResponse:
    message = await message_service.send_message(
        principal.subject,
        body.conversation_id,
        body.resolve_recipient(),
        body.body,
        uow,
        notifier,
    )
    return MessageResponse.model_validate(message)


@router.get("/with/{other_id}", response_model=list[MessageResponse])
async def list_messages_with_user(
    other_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.get_messages_with_user(principal.subject, other_id, uow)
    return [MessageResponse.model_validate(m) for m in messages]
