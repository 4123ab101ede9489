"""Conversation snapshot database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from ...utils.time_range import utc_now


@dataclass
class ConversationDO:
    """Conversation snapshot - maps to conversations table."""

    key: str
    messages: List[Dict[str, Any]] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
