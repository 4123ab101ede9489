"""Capability interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..config import Settings
from ..llm import LanguageModel
from ..search import Citation
from ..services.context_registry import RequestContext
from ..services.store import ConversationStore
from ..utils.logger import get_app_logger
from ..utils.time_range import TimeRange, default_window


class CapabilityKind(str, Enum):
    """The specialists a request can be delegated to."""

    SUMMARIZER = "summarizer"
    ACTION_ITEMS = "action_items"
    SEARCH = "search"


@dataclass(frozen=True)
class CapabilityRequest:
    """Everything a capability needs for one run."""

    user_request: str
    context: RequestContext
    time_range: Optional[TimeRange] = None


@dataclass
class CapabilityResult:
    """Text answer plus the citations that back it."""

    text: str
    citations: List[Citation] = field(default_factory=list)


class BaseCapability(ABC):
    """
    Base class for capabilities.

    Capabilities hold no per-request state; each run gets everything it
    needs through its CapabilityRequest and answers through its result.
    """

    kind: CapabilityKind

    def __init__(self, store: ConversationStore, model: LanguageModel, settings: Settings):
        self.store = store
        self.model = model
        self.settings = settings
        self.logger = get_app_logger("capabilities")

    def resolve_window(self, request: CapabilityRequest) -> Optional[TimeRange]:
        """The resolved range, or this capability's default window."""
        if request.time_range is not None:
            return request.time_range
        return default_window(request.context.now())

    @staticmethod
    def chat_type(context: RequestContext) -> str:
        return "personal" if context.is_personal_chat else "group"

    @abstractmethod
    async def run(self, request: CapabilityRequest) -> CapabilityResult:
        """
        Handle one delegated request.

        Args:
            request: Capability request

        Returns:
            CapabilityResult
        """
        pass
