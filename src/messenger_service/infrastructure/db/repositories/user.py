from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from messenger_service.domain.entities.user import User
from messenger_service.infrastructure.db.mappers import user as mapper
from messenger_service.infrastructure.db.models.user import UserModel

logger = logging.getLogger(__name__)


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None

    async def get_by_messenger_id(self, messenger_id: str) -> User | None:
        stmt = select(UserModel).where(UserModel.messenger_id == messenger_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def messenger_id_exists(self, messenger_id: str) -> bool:
        stmt = select(UserModel.id).where(UserModel.messenger_id == messenger_id).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_without_messenger_id(self, limit: int = 500) -> list[User]:
        stmt = (
            select(UserModel)
            .where(UserModel.messenger_id.is_(None))
            .order_by(UserModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class UserWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def assign_messenger_id(self, user_id: str, messenger_id: str) -> bool:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.messenger_id.is_(None))
            .values(messenger_id=messenger_id)
        )
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except IntegrityError:
            logger.debug("Messenger id %s was taken concurrently", messenger_id)
            return False
        return result.rowcount == 1
