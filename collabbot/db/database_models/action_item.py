"""Action item database model."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ...utils.time_range import utc_now


class ActionItemStatus(str, Enum):
    """Lifecycle states of an action item."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ActionItemStatus.COMPLETED, ActionItemStatus.CANCELLED)

    def can_transition(self, target: "ActionItemStatus") -> bool:
        """Whether moving from this state to ``target`` is allowed."""
        return target in _TRANSITIONS[self]


_TRANSITIONS = {
    ActionItemStatus.PENDING: {ActionItemStatus.IN_PROGRESS, ActionItemStatus.CANCELLED},
    ActionItemStatus.IN_PROGRESS: {ActionItemStatus.COMPLETED, ActionItemStatus.CANCELLED},
    ActionItemStatus.COMPLETED: set(),
    ActionItemStatus.CANCELLED: set(),
}


class ActionItemPriority(str, Enum):
    """Action item priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


@dataclass
class ActionItemDO:
    """Action item data object - maps to action_items table."""

    conversation_id: str
    title: str
    description: str
    assigned_to: str
    assigned_by: str
    assigned_to_id: Optional[str] = None
    assigned_by_id: Optional[str] = None
    status: ActionItemStatus = ActionItemStatus.PENDING
    priority: ActionItemPriority = ActionItemPriority.MEDIUM
    due_date: Optional[str] = None
    source_message_ids: List[int] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "conversation_id": self.conversation_id,
            "title": self.title,
            "description": self.description,
            "assigned_to": self.assigned_to,
            "assigned_to_id": self.assigned_to_id,
            "assigned_by": self.assigned_by,
            "assigned_by_id": self.assigned_by_id,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": self.due_date,
            "source_message_ids": list(self.source_message_ids),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
