"""Shared test fixtures."""
from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from messenger_service.domain.entities.conversation import Conversation
from messenger_service.domain.entities.message import Message
from messenger_service.domain.entities.user import User
from messenger_service.domain.value_objects.participant_key import ParticipantKey, participant_key

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_user(
    user_id: str,
    messenger_id: str | None = None,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    photo_url: str | None = None,
) -> User:
    return User(
        id=user_id,
        messenger_id=messenger_id,
        first_name=first_name,
        last_name=last_name,
        photo_url=photo_url,
    )


def make_conversation(
    a: str,
    b: str,
    *,
    conversation_id: UUID | None = None,
    created_at: datetime = T0,
    last_message_at: datetime | None = None,
    preview: str | None = "Say hello",
    unread_by: tuple[str, ...] = (),
    ordered: bool = True,
) -> Conversation:
    """``ordered=False`` stores the pair as given, like rows written by old code."""
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        participant_ids=participant_key(a, b) if ordered else (a, b),
        created_at=created_at,
        last_message_at=last_message_at or created_at,
        last_message_preview=preview,
        unread_by=unread_by,
    )


def make_message(
    conversation_id: UUID,
    sender_id: str,
    recipient_id: str,
    body: str = "hello",
    *,
    sent_at: datetime = T0,
    read_at: datetime | None = None,
    message_id: UUID | None = None,
) -> Message:
    return Message(
        id=message_id or uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        recipient_id=recipient_id,
        body=body,
        sent_at=sent_at,
        read_at=read_at,
    )


@dataclass
class FixedClock:
    current: datetime = T0

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@dataclass
class FakeUserReader:
    _users: dict[str, User] = field(default_factory=dict)

    def add(self, *users: User) -> None:
        for user in users:
            self._users[user.id] = user

    async def get_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def get_by_messenger_id(self, messenger_id: str) -> User | None:
        for user in self._users.values():
            if user.messenger_id == messenger_id:
                return user
        return None

    async def messenger_id_exists(self, messenger_id: str) -> bool:
        return await self.get_by_messenger_id(messenger_id) is not None

    async def list_without_messenger_id(self, limit: int = 500) -> list[User]:
        return [u for u in sorted(self._users.values(), key=lambda u: u.id) if not u.messenger_id][:limit]


@dataclass
class FakeUserWriter:
    _reader: FakeUserReader
    _assigned: list[tuple[str, str]] = field(default_factory=list)

    async def assign_messenger_id(self, user_id: str, messenger_id: str) -> bool:
        user = self._reader._users.get(user_id)
        if user is None or user.messenger_id:
            return False
        if await self._reader.messenger_id_exists(messenger_id):
            return False
        self._reader._users[user_id] = replace(user, messenger_id=messenger_id)
        self._assigned.append((user_id, messenger_id))
        return True


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    def add(self, *conversations: Conversation) -> None:
        for conversation in conversations:
            self._store[conversation.id] = conversation

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def find_by_participants(self, key: ParticipantKey) -> Conversation | None:
        for conversation in self._store.values():
            if conversation.merged_into is None and conversation.participant_ids == key:
                return conversation
        return None

    async def list_for_participant(self, identifier: str) -> list[Conversation]:
        matches = [
            c for c in self._store.values()
            if c.merged_into is None and identifier in c.participant_ids
        ]
        return sorted(matches, key=lambda c: c.last_message_at, reverse=True)


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    _saved: list[Conversation] = field(default_factory=list)

    async def create_if_absent(self, conversation: Conversation) -> tuple[Conversation, bool]:
        for existing in self._reader._store.values():
            if existing.participant_ids == conversation.participant_ids:
                return existing, False
        self._reader._store[conversation.id] = conversation
        return conversation, True

    async def save(self, conversation: Conversation) -> None:
        self._reader._store[conversation.id] = conversation
        self._saved.append(conversation)


@dataclass
class FakeMessageReader:
    _messages: dict[UUID, Message] = field(default_factory=dict)

    def add(self, *messages: Message) -> None:
        for message in messages:
            self._messages[message.id] = message

    def all_for(self, conversation_id: UUID) -> list[Message]:
        return [m for m in self._messages.values() if m.conversation_id == conversation_id]

    async def list_for_conversation(self, conversation_id: UUID) -> list[Message]:
        return sorted(self.all_for(conversation_id), key=lambda m: (m.sent_at, m.id))

    async def list_unread(self, conversation_id: UUID, recipient_ids: Sequence[str]) -> list[Message]:
        return [
            m for m in await self.list_for_conversation(conversation_id)
            if m.read_at is None and m.recipient_id in recipient_ids
        ]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    _saved: list[Message] = field(default_factory=list)

    async def create(self, message: Message) -> Message:
        self._reader._messages[message.id] = message
        return message

    async def save_all(self, messages: Sequence[Message]) -> None:
        for message in messages:
            self._reader._messages[message.id] = message
        self._saved.extend(messages)

    async def move_to_conversation(self, source_id: UUID, target_id: UUID) -> int:
        moved = self._reader.all_for(source_id)
        for message in moved:
            self._reader._messages[message.id] = replace(message, conversation_id=target_id)
        return len(moved)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    users_w: FakeUserWriter | None = None
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.users_w is None:
            self.users_w = FakeUserWriter(self.users)
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass


@dataclass
class FakeNotifier:
    _sent: list[tuple[list[str], str, dict[str, Any]]] = field(default_factory=list)
    fail: bool = False

    async def notify(self, user_ids: Iterable[str], event: str, payload: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("push backend down")
        self._sent.append((list(user_ids), str(event), payload))


@dataclass
class FakeSink:
    """Records what a live stream would have written to the client."""
    frames: list[str] = field(default_factory=list)
    fail: bool = False

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("client went away")
        self.frames.append(data)


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def alice() -> User:
    return make_user("u-alice", "alice-9f2c", first_name="Alice", last_name="Liddell")


@pytest.fixture
def bob() -> User:
    return make_user("u-bob", "bob-11aa", first_name="Bob", last_name="Builder")


@pytest.fixture
def people(uow: FakeUoW, alice: User, bob: User) -> FakeUoW:
    uow.users.add(alice, bob)
    return uow
