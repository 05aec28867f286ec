from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

from messenger_service.application.exceptions import ForbiddenError, NotFoundError
from messenger_service.services import read_state_service
from tests.conftest import T0, make_conversation, make_message, make_user


@pytest.fixture
def conversation(people):
    conv = make_conversation("alice-9f2c", "bob-11aa", unread_by=("bob-11aa",))
    people.conversations.add(conv)
    people.messages.add(
        make_message(conv.id, "alice-9f2c", "bob-11aa", "one", sent_at=T0),
        make_message(conv.id, "u-alice", "u-bob", "two", sent_at=T0 + timedelta(seconds=1)),
        make_message(conv.id, "bob-11aa", "alice-9f2c", "three", sent_at=T0 + timedelta(seconds=2)),
    )
    return conv


@pytest.mark.asyncio
async def test_mark_read_stamps_callers_messages(people, conversation, clock):
    clock.advance(minutes=10)

    count = await read_state_service.mark_read("bob-11aa", conversation.id, people, clock)

    assert count == 2
    stored = await people.messages.list_for_conversation(conversation.id)
    to_bob = [m for m in stored if m.recipient_id == "bob-11aa"]
    assert len(to_bob) == 2
    assert all(m.read_at == clock.now() for m in to_bob)
    [to_alice] = [m for m in stored if m.recipient_id == "alice-9f2c"]
    assert to_alice.read_at is None
    assert people.conversations._store[conversation.id].unread_by == ()
    assert people._committed is True


@pytest.mark.asyncio
async def test_mark_read_is_idempotent(people, conversation, clock):
    await read_state_service.mark_read("u-bob", conversation.id, people, clock)

    assert await read_state_service.mark_read("bob-11aa", conversation.id, people, clock) == 0
    assert people.conversations._store[conversation.id].unread_by == ()


@pytest.mark.asyncio
async def test_mark_read_leaves_other_participant_flag(people, clock):
    conv = make_conversation("alice-9f2c", "bob-11aa", unread_by=("alice-9f2c",))
    people.conversations.add(conv)

    assert await read_state_service.mark_read("bob-11aa", conv.id, people, clock) == 0
    assert people.conversations._store[conv.id].unread_by == ("alice-9f2c",)


@pytest.mark.asyncio
async def test_mark_read_forbidden_for_stranger(people, conversation, clock):
    people.users.add(make_user("u-carol", "carol-0001"))

    with pytest.raises(ForbiddenError):
        await read_state_service.mark_read("carol-0001", conversation.id, people, clock)


@pytest.mark.asyncio
async def test_mark_read_unknown_conversation(people, clock):
    with pytest.raises(NotFoundError):
        await read_state_service.mark_read("bob-11aa", uuid.uuid4(), people, clock)
    assert people._committed is False
