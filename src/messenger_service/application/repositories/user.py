from __future__ import annotations

from typing import Protocol

from messenger_service.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...

    async def get_by_messenger_id(self, messenger_id: str) -> User | None: ...

    async def messenger_id_exists(self, messenger_id: str) -> bool: ...

    async def list_without_messenger_id(self, limit: int = 500) -> list[User]: ...


class UserWriter(Protocol):
    async def assign_messenger_id(self, user_id: str, messenger_id: str) -> bool:
        """Set the handle only if the user has none yet. True when written."""
        ...
