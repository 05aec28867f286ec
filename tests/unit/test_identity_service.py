from __future__ import annotations

import re
from dataclasses import replace

import pytest

from messenger_service.application.exceptions import (
    HandleGenerationExhaustedError,
    InvalidArgumentError,
    NotFoundError,
)
from messenger_service.domain.services import handles
from messenger_service.services import identity_service
from tests.conftest import FakeUoW, make_user


def _suffixes(monkeypatch, *values: str) -> None:
    it = iter(values)
    monkeypatch.setattr(handles, "random_suffix", lambda: next(it))


@pytest.mark.asyncio
async def test_resolve_prefers_messenger_id(people, bob):
    # A legacy id that happens to equal someone else's handle.
    impostor = make_user("bob-11aa", None, first_name="Legacy")
    people.users.add(impostor)

    user = await identity_service.resolve(" bob-11aa ", people)

    assert user.id == bob.id


@pytest.mark.asyncio
async def test_resolve_falls_back_to_legacy_id(people, alice):
    user = await identity_service.resolve("u-alice", people)
    assert user == alice


@pytest.mark.asyncio
async def test_resolve_rejects_blank(people):
    with pytest.raises(InvalidArgumentError):
        await identity_service.resolve("   ", people)


@pytest.mark.asyncio
async def test_resolve_unknown(people):
    with pytest.raises(NotFoundError):
        await identity_service.resolve("nobody", people)


@pytest.mark.asyncio
async def test_ensure_handle_keeps_existing(people, alice):
    assert await identity_service.ensure_handle(alice, people) == "alice-9f2c"
    assert people.users_w._assigned == []


@pytest.mark.asyncio
async def test_ensure_handle_assigns_from_name():
    uow = FakeUoW()
    carol = make_user("u-carol", None, first_name="Carol", last_name="Smith")
    uow.users.add(carol)

    handle = await identity_service.ensure_handle(carol, uow)

    assert re.fullmatch(r"carolsmith-[0-9a-f]{4}", handle)
    assert (await uow.users.get_by_id("u-carol")).messenger_id == handle


@pytest.mark.asyncio
async def test_ensure_handle_retries_on_collision(monkeypatch):
    uow = FakeUoW()
    uow.users.add(
        make_user("u-other", "carol-0000"),
        make_user("u-carol", None, first_name="Carol"),
    )
    _suffixes(monkeypatch, "0000", "0001")

    handle = await identity_service.ensure_handle(await uow.users.get_by_id("u-carol"), uow)

    assert handle == "carol-0001"


@pytest.mark.asyncio
async def test_ensure_handle_gives_up(monkeypatch):
    uow = FakeUoW()
    uow.users.add(
        make_user("u-other", "carol-0000"),
        make_user("u-carol", None, first_name="Carol"),
    )
    monkeypatch.setattr(handles, "random_suffix", lambda: "0000")

    with pytest.raises(HandleGenerationExhaustedError):
        await identity_service.ensure_handle(await uow.users.get_by_id("u-carol"), uow)

    assert uow.users_w._assigned == []


@pytest.mark.asyncio
async def test_ensure_handle_returns_concurrently_assigned_handle():
    uow = FakeUoW()
    carol = make_user("u-carol", None, first_name="Carol")
    uow.users.add(carol)

    async def _lost_race(user_id: str, messenger_id: str) -> bool:
        uow.users._users[user_id] = replace(carol, messenger_id="carol-beef")
        return False

    uow.users_w.assign_messenger_id = _lost_race

    assert await identity_service.ensure_handle(carol, uow) == "carol-beef"


@pytest.mark.asyncio
async def test_canonical_map_covers_both_identifiers(people):
    mapping = await identity_service.canonical_map(["u-alice", "bob-11aa", "ghost"], people)

    assert mapping["u-alice"] == "alice-9f2c"
    assert mapping["alice-9f2c"] == "alice-9f2c"
    assert mapping["u-bob"] == "bob-11aa"
    assert "ghost" not in mapping


@pytest.mark.asyncio
async def test_find_user_swallows_lookup_errors(people):
    assert await identity_service.find_user("ghost", people) is None
    assert await identity_service.find_user("", people) is None


def test_display_name_fallbacks():
    assert identity_service.display_name(None) == "Unknown"
    assert identity_service.display_name(make_user("u-x", None)) == "Unknown"
    assert identity_service.display_name(make_user("u-x", None, first_name="Ann")) == "Ann"


@pytest.mark.asyncio
async def test_backfill_handles_assigns_every_missing_handle(people):
    people.users.add(
        make_user("u-carol", None, first_name="Carol"),
        make_user("u-dave", None, first_name="Dave"),
    )

    updated = await identity_service.backfill_handles(people, batch_size=1)

    assert updated == 2
    assert await people.users.list_without_messenger_id() == []
    assert people._committed is True
