"""API v1 package."""

from .conversations import router as conversations_router
from .action_items import router as action_items_router
from .activities import router as activities_router

__all__ = ["conversations_router", "action_items_router", "activities_router"]
