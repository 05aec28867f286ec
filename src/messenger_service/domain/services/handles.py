"""Public messenger handle derivation."""
from __future__ import annotations

import re
import secrets
import unicodedata

BASE_MAX_LENGTH = 20
DEFAULT_BASE = "user"

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def handle_base(first_name: str | None, last_name: str | None) -> str:
    """Fold ``first + last`` to a lowercase ASCII alphanumeric stem.

    >>> handle_base("Zoë", "O'Brien")
    'zoeobrien'
    """
    raw = (first_name or "") + (last_name or "")
    folded = unicodedata.normalize("NFD", raw).encode("ascii", "ignore").decode("ascii")
    base = _NON_ALNUM.sub("", folded).lower()
    return base[:BASE_MAX_LENGTH] or DEFAULT_BASE


def random_suffix() -> str:
    """Four lowercase hex digits."""
    return secrets.token_hex(2)


def candidate_handle(base: str, suffix: str) -> str:
    return f"{base}-{suffix}"
