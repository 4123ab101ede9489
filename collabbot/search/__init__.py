"""Message search providers and citations."""

from .base import BaseSearchProvider, Citation, SearchParams, SearchResult
from .keyword import KeywordSearchProvider
from .semantic import SemanticSearchProvider
from .citations import build_citation, citations_for, group_messages_by_time
from .factory import create_search_provider

__all__ = [
    "BaseSearchProvider",
    "Citation",
    "SearchParams",
    "SearchResult",
    "KeywordSearchProvider",
    "SemanticSearchProvider",
    "build_citation",
    "citations_for",
    "group_messages_by_time",
    "create_search_provider",
]
