"""Capabilities the router can delegate to."""

from .base import BaseCapability, CapabilityKind, CapabilityRequest, CapabilityResult
from .summarizer import SummarizerCapability
from .action_items import ActionItemsCapability
from .search import SearchCapability

__all__ = [
    "BaseCapability",
    "CapabilityKind",
    "CapabilityRequest",
    "CapabilityResult",
    "SummarizerCapability",
    "ActionItemsCapability",
    "SearchCapability",
]
