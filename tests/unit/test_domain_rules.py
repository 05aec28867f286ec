from __future__ import annotations

import re
from dataclasses import replace
from datetime import timedelta

from messenger_service.domain.services import handles
from messenger_service.domain.services.conversation_rules import (
    GREETING_PREVIEW,
    apply_message,
    mark_read_by,
    merge_into,
    new_conversation,
    truncate_preview,
)
from messenger_service.domain.services.identifier_migration import (
    normalize_conversation,
    normalize_message,
)
from messenger_service.domain.value_objects.participant_key import participant_key
from tests.conftest import T0, make_conversation, make_message


def test_participant_key_is_order_independent():
    assert participant_key("bob-11aa", "alice-9f2c") == ("alice-9f2c", "bob-11aa")
    assert participant_key("alice-9f2c", "bob-11aa") == ("alice-9f2c", "bob-11aa")


def test_handle_base_folds_accents_and_punctuation():
    assert handles.handle_base("Zoë", "O'Brien") == "zoeobrien"


def test_handle_base_defaults_when_nothing_usable():
    assert handles.handle_base(None, None) == "user"
    assert handles.handle_base("李", "") == "user"


def test_handle_base_is_capped():
    base = handles.handle_base("Bartholomew", "Montgomery-Fitzwilliam")
    assert len(base) == handles.BASE_MAX_LENGTH
    assert base == "bartholomewmontgomer"


def test_candidate_handle_shape():
    handle = handles.candidate_handle("alice", handles.random_suffix())
    assert re.fullmatch(r"alice-[0-9a-f]{4}", handle)


def test_new_conversation_starts_with_greeting():
    conv = new_conversation("bob-11aa", "alice-9f2c", T0)

    assert conv.participant_ids == ("alice-9f2c", "bob-11aa")
    assert conv.last_message_preview == GREETING_PREVIEW
    assert conv.last_message_at == T0
    assert conv.unread_by == ()


def test_truncate_preview():
    assert truncate_preview("short") == "short"
    long_body = "x" * 90
    assert truncate_preview(long_body) == "x" * 80 + "…"


def test_apply_message_moves_unread_flag_to_recipient():
    conv = make_conversation("alice-9f2c", "bob-11aa", unread_by=("alice-9f2c",))
    msg = make_message(conv.id, "alice-9f2c", "bob-11aa", "hi", sent_at=T0 + timedelta(minutes=3))

    updated = apply_message(conv, msg)

    assert updated.unread_by == ("bob-11aa",)
    assert updated.last_message_preview == "hi"
    assert updated.last_message_at == T0 + timedelta(minutes=3)


def test_apply_message_does_not_duplicate_unread():
    conv = make_conversation("alice-9f2c", "bob-11aa", unread_by=("bob-11aa",))
    msg = make_message(conv.id, "alice-9f2c", "bob-11aa")

    assert apply_message(conv, msg).unread_by == ("bob-11aa",)


def test_mark_read_by_is_noop_when_nothing_unread():
    conv = make_conversation("alice-9f2c", "bob-11aa")
    assert mark_read_by(conv, "bob-11aa") is conv


def test_merge_into_keeps_newest_summary_and_oldest_creation():
    older = make_conversation(
        "alice-9f2c", "bob-11aa",
        created_at=T0 - timedelta(days=2),
        last_message_at=T0 + timedelta(hours=5),
        preview="latest words",
        unread_by=("alice-9f2c",),
    )
    survivor = make_conversation(
        "alice-9f2c", "bob-11aa",
        created_at=T0,
        last_message_at=T0 + timedelta(hours=1),
        preview="earlier",
        unread_by=("bob-11aa",),
    )

    merged = merge_into(survivor, older)

    assert merged.id == survivor.id
    assert merged.created_at == T0 - timedelta(days=2)
    assert merged.last_message_preview == "latest words"
    assert set(merged.unread_by) == {"alice-9f2c", "bob-11aa"}


def test_normalize_conversation_rewrites_legacy_ids():
    conv = make_conversation("u-bob", "u-alice", unread_by=("u-bob", "bob-11aa"))
    mapping = {"u-alice": "alice-9f2c", "u-bob": "bob-11aa", "bob-11aa": "bob-11aa"}

    normalized, changed = normalize_conversation(conv, mapping)

    assert changed is True
    assert normalized.id == conv.id
    assert normalized.participant_ids == ("alice-9f2c", "bob-11aa")
    assert normalized.unread_by == ("bob-11aa",)


def test_normalize_conversation_reports_no_change():
    conv = make_conversation("alice-9f2c", "bob-11aa")

    normalized, changed = normalize_conversation(conv, {"alice-9f2c": "alice-9f2c"})

    assert changed is False
    assert normalized is conv


def test_normalize_conversation_keeps_unknown_identifiers():
    conv = make_conversation("u-alice", "ghost")

    normalized, changed = normalize_conversation(conv, {"u-alice": "alice-9f2c"})

    assert changed is True
    assert normalized.participant_ids == ("alice-9f2c", "ghost")


def test_normalize_unread_drops_non_participants():
    conv = replace(make_conversation("alice-9f2c", "bob-11aa"), unread_by=("carol-0001",))

    normalized, changed = normalize_conversation(conv, {})

    assert changed is True
    assert normalized.unread_by == ()


def test_normalize_message():
    conv = make_conversation("alice-9f2c", "bob-11aa")
    msg = make_message(conv.id, "u-alice", "bob-11aa")

    normalized, changed = normalize_message(msg, {"u-alice": "alice-9f2c"})
    assert changed is True
    assert normalized.sender_id == "alice-9f2c"
    assert normalized.recipient_id == "bob-11aa"

    again, changed_again = normalize_message(normalized, {"u-alice": "alice-9f2c"})
    assert changed_again is False
    assert again is normalized
