"""FastAPI dependency injection helpers."""
from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from messenger_service.application.dto.principal import Principal
from messenger_service.application.ports.auth import TokenVerifier
from messenger_service.application.ports.notifier import EventNotifier
from messenger_service.application.uow import UnitOfWork
from messenger_service.config import settings
from messenger_service.infrastructure.auth.hs256_verifier import HS256Verifier
from messenger_service.infrastructure.auth.jwks_verifier import JWKSVerifier
from messenger_service.infrastructure.db.session import open_uow
from messenger_service.infrastructure.realtime.hub import PushHub

_bearer_scheme = HTTPBearer()

UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


def get_uow_factory() -> UoWFactory:
    return open_uow


UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


async def get_uow(factory: UoWFactoryDep) -> AsyncIterator[UnitOfWork]:
    async with factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_hub(conn: HTTPConnection) -> PushHub:
    return conn.app.state.hub


def get_notifier(conn: HTTPConnection) -> EventNotifier:
    return conn.app.state.notifier


HubDep = Annotated[PushHub, Depends(get_hub)]
NotifierDep = Annotated[EventNotifier, Depends(get_notifier)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
