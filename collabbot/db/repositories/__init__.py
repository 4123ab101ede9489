"""Repository layer for data access."""

from .conversation import ConversationRepository
from .message import MessageRepository
from .action_item import ActionItemRepository

__all__ = ["ConversationRepository", "MessageRepository", "ActionItemRepository"]
