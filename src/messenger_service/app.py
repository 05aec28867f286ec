from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from messenger_service.api.middleware.access_log import AccessLogMiddleware
from messenger_service.api.middleware.correlation_id import CorrelationIdMiddleware
from messenger_service.api.v1.routers import conversations, health, messages, stream
from messenger_service.application.exceptions import (
    ForbiddenError,
    HandleGenerationExhaustedError,
    InvalidArgumentError,
    NotFoundError,
)
from messenger_service.config import settings
from messenger_service.infrastructure.bus.redis_pubsub import RedisPubSubSubscriber, relay_to_hub
from messenger_service.infrastructure.db.session import open_uow
from messenger_service.infrastructure.realtime.heartbeat import HeartbeatTask
from messenger_service.infrastructure.realtime.hub import PushHub
from messenger_service.infrastructure.realtime.notifier import HubNotifier, RedisFanoutNotifier
from messenger_service.services import identity_service

logger = logging.getLogger(__name__)


async def _backfill_handles() -> None:
    async with open_uow() as uow:
        updated = await identity_service.backfill_handles(uow)
    if updated:
        logger.info("Backfilled messenger ids for %d existing users", updated)
    else:
        logger.info("All users already have messenger ids")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    hub: PushHub = app.state.hub

    if settings.BACKFILL_HANDLES_ON_STARTUP:
        await _backfill_handles()

    subscriber: RedisPubSubSubscriber | None = None
    if settings.PUSH_FANOUT == "redis":
        app.state.redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        subscriber = RedisPubSubSubscriber(
            app.state.redis,
            settings.REDIS_PUBSUB_CHANNEL,
            relay_to_hub(hub),
        )
        await subscriber.start()
        app.state.notifier = RedisFanoutNotifier(app.state.redis, settings.REDIS_PUBSUB_CHANNEL)

    heartbeat = HeartbeatTask(hub, settings.PUSH_HEARTBEAT_SECONDS)
    await heartbeat.start()

    yield

    await heartbeat.stop()
    hub.close_all()
    if subscriber is not None:
        await subscriber.stop()
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Messenger Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # One hub per process, owned by the app and handed to handlers via deps.
    hub = PushHub()
    app.state.hub = hub
    app.state.notifier = HubNotifier(hub)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(stream.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(InvalidArgumentError)
    async def _invalid(_req: Request, exc: InvalidArgumentError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": exc.detail})

    @app.exception_handler(HandleGenerationExhaustedError)
    async def _exhausted(req: Request, exc: HandleGenerationExhaustedError) -> JSONResponse:
        logger.error("Handle generation exhausted on %s %s", req.method, req.url.path)
        return JSONResponse(status_code=500, content={"detail": exc.detail})
