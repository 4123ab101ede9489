"""Database models (Data Objects) - map to database tables."""

from .conversation import ConversationDO
from .message import MessageDO, MessageRole
from .action_item import ActionItemDO, ActionItemStatus, ActionItemPriority

__all__ = [
    "ConversationDO",
    "MessageDO",
    "MessageRole",
    "ActionItemDO",
    "ActionItemStatus",
    "ActionItemPriority",
]
