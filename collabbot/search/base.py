"""Search provider interface and result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..db.database_models import MessageDO


@dataclass
class Citation:
    """A reference to a stored message that a reply can link to."""

    name: str
    url: str
    abstract: str
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url, "abstract": self.abstract, "keywords": list(self.keywords)}


@dataclass
class SearchParams:
    """What to look for inside one conversation."""

    keywords: List[str] = field(default_factory=list)
    participants: List[str] = field(default_factory=list)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    max_results: int = 10


@dataclass
class SearchResult:
    """Messages found by a provider, newest or most relevant first."""

    messages: List[MessageDO]
    total_found: int
    method: str
    citations: List[Citation] = field(default_factory=list)
    debug_info: Dict[str, Any] = field(default_factory=dict)


class BaseSearchProvider(ABC):
    """Base class for message search providers."""

    name: str = "base"

    @abstractmethod
    async def search_messages(self, conversation_id: str, params: SearchParams) -> SearchResult:
        """
        Search messages of one conversation.

        Args:
            conversation_id: Conversation key; results never cross conversations
            params: Search parameters

        Returns:
            SearchResult
        """
        pass

    async def aclose(self) -> None:
        """Release provider resources."""
        return None
