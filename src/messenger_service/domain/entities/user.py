from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class User:
    """Read-only view of an account owned by the identity collaborator.

    ``id`` is the legacy internal identifier; ``messenger_id`` is the public
    handle that every persisted participant field is normalized toward.
    """

    id: str
    messenger_id: str | None
    first_name: str | None = None
    last_name: str | None = None
    photo_url: str | None = None

    @property
    def display_name(self) -> str:
        first = (self.first_name or "").strip()
        last = (self.last_name or "").strip()
        return f"{first} {last}".strip() or "Unknown"
