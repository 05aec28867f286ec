from __future__ import annotations

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from messenger_service.api.deps import HubDep, UoWFactoryDep, get_verifier
from messenger_service.application.dto.principal import Principal
from messenger_service.application.exceptions import AppError
from messenger_service.domain.value_objects.enums import StreamEvent
from messenger_service.infrastructure.realtime.protocol import StreamInbound, StreamOutbound
from messenger_service.infrastructure.realtime.subscription import Subscription, SubscriptionClosedError
from messenger_service.services import identity_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["stream"])


async def _authenticate(token: str) -> Principal | None:
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("Stream auth failed", exc_info=True)
        return None


@router.websocket("/ws/events")
async def ws_events(
    websocket: WebSocket,
    hub: HubDep,
    uow_factory: UoWFactoryDep,
    token: str = Query(...),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    try:
        async with uow_factory() as uow:
            handle = await identity_service.canonicalize(principal.subject, uow)
            await uow.commit()
    except AppError as exc:
        await websocket.close(code=4004, reason=exc.detail)
        return

    await websocket.accept()
    subscription = await hub.subscribe(handle, websocket)
    try:
        await _read_loop(websocket, subscription)
    except (WebSocketDisconnect, SubscriptionClosedError):
        logger.debug("Live stream for %s ended", handle)
    except Exception:
        logger.exception("Live stream error for %s", handle)
    finally:
        subscription.close()


async def _read_loop(ws: WebSocket, subscription: Subscription) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            inbound = StreamInbound.model_validate_json(raw)
        except ValidationError:
            await subscription.send(
                StreamOutbound(type=StreamEvent.ERROR.value, data={"code": "invalid_payload"}).model_dump_json()
            )
            continue

        if inbound.type == "ping":
            await subscription.send(StreamOutbound(type=StreamEvent.PONG.value, data={}).model_dump_json())
        else:
            await subscription.send(
                StreamOutbound(
                    type=StreamEvent.ERROR.value,
                    data={"code": "unknown_type", "type": inbound.type},
                ).model_dump_json()
            )
