"""Resolve user identifiers and guarantee every user has a messenger handle."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from messenger_service.application.exceptions import (
    HandleGenerationExhaustedError,
    InvalidArgumentError,
    NotFoundError,
)
from messenger_service.application.uow import UnitOfWork
from messenger_service.domain.entities.user import User
from messenger_service.domain.services import handles

logger = logging.getLogger(__name__)

MAX_HANDLE_ATTEMPTS = 12
BACKFILL_BATCH_SIZE = 500


async def resolve(identifier: str | None, uow: UnitOfWork) -> User:
    """Look the user up by messenger handle first, then by legacy id."""
    value = (identifier or "").strip()
    if not value:
        raise InvalidArgumentError("Missing user identifier")

    user = await uow.users.get_by_messenger_id(value)
    if user is None:
        user = await uow.users.get_by_id(value)
    if user is None:
        raise NotFoundError(f"User {value} not found")
    return user


async def ensure_handle(user: User, uow: UnitOfWork) -> str:
    if user.messenger_id:
        return user.messenger_id

    base = handles.handle_base(user.first_name, user.last_name)
    for _attempt in range(MAX_HANDLE_ATTEMPTS):
        candidate = handles.candidate_handle(base, handles.random_suffix())
        if await uow.users.messenger_id_exists(candidate):
            continue
        if await uow.users_w.assign_messenger_id(user.id, candidate):
            logger.info("Assigned messenger id %s to user %s", candidate, user.id)
            return candidate

        # Lost the race against a concurrent request for the same user.
        current = await uow.users.get_by_id(user.id)
        if current is None:
            raise NotFoundError(f"User {user.id} not found")
        if current.messenger_id:
            return current.messenger_id

    logger.error(
        "Unable to generate a unique messenger id for user %s after %d attempts",
        user.id, MAX_HANDLE_ATTEMPTS,
    )
    raise HandleGenerationExhaustedError("Unable to generate unique messenger ID")


async def resolve_with_handle(identifier: str | None, uow: UnitOfWork) -> User:
    """Resolve and return the user with ``messenger_id`` guaranteed set."""
    user = await resolve(identifier, uow)
    handle = await ensure_handle(user, uow)
    return user if user.messenger_id == handle else replace(user, messenger_id=handle)


async def canonicalize(identifier: str, uow: UnitOfWork) -> str:
    user = await resolve(identifier, uow)
    return await ensure_handle(user, uow)


async def canonical_map(identifiers: Iterable[str], uow: UnitOfWork) -> dict[str, str]:
    """Map each resolvable identifier to its handle. Unknown ones are omitted."""
    mapping: dict[str, str] = {}
    for identifier in set(identifiers):
        if not identifier or identifier in mapping:
            continue
        try:
            user = await resolve_with_handle(identifier, uow)
        except NotFoundError:
            logger.debug("Identifier %s does not resolve, keeping it as stored", identifier)
            continue
        assert user.messenger_id is not None
        mapping[identifier] = user.messenger_id
        mapping[user.id] = user.messenger_id
        mapping[user.messenger_id] = user.messenger_id
    return mapping


async def find_user(identifier: str, uow: UnitOfWork) -> User | None:
    try:
        return await resolve(identifier, uow)
    except (NotFoundError, InvalidArgumentError):
        return None


def display_name(user: User | None) -> str:
    return user.display_name if user is not None else "Unknown"


def photo_url(user: User | None) -> str | None:
    return user.photo_url if user is not None else None


async def backfill_handles(uow: UnitOfWork, *, batch_size: int = BACKFILL_BATCH_SIZE) -> int:
    """Give every user without a messenger handle one. Returns how many were set."""
    updated = 0
    while True:
        batch = await uow.users.list_without_messenger_id(limit=batch_size)
        if not batch:
            break
        for user in batch:
            await ensure_handle(user, uow)
            updated += 1
        await uow.commit()
    return updated
