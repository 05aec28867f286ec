"""Import all models so ``Base.metadata`` knows every table."""
from messenger_service.infrastructure.db.models.conversation import ConversationModel
from messenger_service.infrastructure.db.models.message import MessageModel
from messenger_service.infrastructure.db.models.user import UserModel

__all__ = [
    "ConversationModel",
    "MessageModel",
    "UserModel",
]
