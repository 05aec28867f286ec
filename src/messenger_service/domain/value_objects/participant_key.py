"""Canonical ordering of a direct conversation's two participants."""
from __future__ import annotations

ParticipantKey = tuple[str, str]


def participant_key(a: str, b: str) -> ParticipantKey:
    """Smaller identifier first, so (a, b) and (b, a) share one key."""
    return (a, b) if a <= b else (b, a)
