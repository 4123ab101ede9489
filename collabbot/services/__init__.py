"""Services package."""

from .store import ConversationStore
from .context_registry import ContextRegistry, RequestContext, context_registry

__all__ = ["ConversationStore", "ContextRegistry", "RequestContext", "context_registry"]
