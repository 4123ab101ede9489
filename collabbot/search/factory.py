"""Search provider selection."""

from ..config import Settings
from ..services.store import ConversationStore
from ..utils.logger import get_app_logger
from .base import BaseSearchProvider
from .keyword import KeywordSearchProvider
from .semantic import SemanticSearchProvider


def create_search_provider(store: ConversationStore, settings: Settings) -> BaseSearchProvider:
    """
    Create the provider named by ``settings.search_type``.

    Args:
        store: Conversation store
        settings: Application settings

    Returns:
        Search provider instance

    Raises:
        ValueError: If the search type is unknown
    """
    logger = get_app_logger("search")
    search_type = settings.search_type.lower()

    if search_type == "keyword":
        return KeywordSearchProvider(store)

    if search_type == "semantic":
        config = settings.get_semantic_search_config()
        if config is None:
            logger.warning("Semantic search selected but not configured; queries will use keyword search")
            return SemanticSearchProvider(store, index_name=settings.semantic_search_index)
        return SemanticSearchProvider(store, **config)

    raise ValueError(f"Unknown search type: {settings.search_type}")
