"""Database package - connection, models, and repositories."""

from .connection import DatabaseConnection
from .repositories.conversation import ConversationRepository
from .repositories.message import MessageRepository
from .repositories.action_item import ActionItemRepository

__all__ = [
    "DatabaseConnection",
    "ConversationRepository",
    "MessageRepository",
    "ActionItemRepository",
]
