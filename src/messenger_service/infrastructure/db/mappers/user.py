from __future__ import annotations

from messenger_service.domain.entities.user import User
from messenger_service.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        messenger_id=model.messenger_id,
        first_name=model.first_name,
        last_name=model.last_name,
        photo_url=model.photo_url,
    )
