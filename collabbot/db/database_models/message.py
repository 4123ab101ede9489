"""Message database model."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ...utils.time_range import utc_now


class MessageRole(str, Enum):
    """Who produced a message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class MessageDO:
    """Message data object - maps to messages table."""

    conversation_id: str
    role: str
    content: str
    name: str = "Unknown"
    timestamp: datetime = field(default_factory=utc_now)
    activity_id: Optional[str] = None
    id: Optional[int] = None
    # Relevance score, only set on search results
    score: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "conversation_id": self.conversation_id,
            "role": self.role,
            "name": self.name,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "activity_id": self.activity_id,
        }
