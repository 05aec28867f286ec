"""Request correlation ids for HTTP requests and live streams."""
from __future__ import annotations

import uuid
from contextvars import ContextVar

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """Pure ASGI so WebSocket streams are tagged too, for their whole lifetime.

    The caller's ``X-Request-ID`` is reused when present; HTTP responses echo
    the id back.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        cid = Headers(scope=scope).get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = correlation_id_ctx.set(cid)

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append(REQUEST_ID_HEADER, cid)
            await send(message)

        try:
            await self.app(scope, receive, send_with_id)
        finally:
            correlation_id_ctx.reset(token)
