"""Tests for search provider selection."""

import pytest

from collabbot.config import Settings
from collabbot.search import KeywordSearchProvider, SemanticSearchProvider, create_search_provider


class TestCreateSearchProvider:
    """SUT: create_search_provider"""

    def test_keyword(self, store):
        """keyword selects the local provider."""
        provider = create_search_provider(store, Settings(_env_file=None, search_type="keyword"))
        assert isinstance(provider, KeywordSearchProvider)

    async def test_semantic_configured(self, store):
        """semantic with full configuration targets the index."""
        settings = Settings(
            _env_file=None,
            search_type="Semantic",
            semantic_search_endpoint="https://search.example.com",
            semantic_search_api_key="k",
            semantic_search_index="chat"
        )
        provider = create_search_provider(store, settings)
        assert isinstance(provider, SemanticSearchProvider)
        assert provider.is_configured
        assert provider.index_name == "chat"
        await provider.aclose()

    async def test_semantic_unconfigured(self, store):
        """semantic without configuration still builds a provider that falls back."""
        provider = create_search_provider(store, Settings(_env_file=None, search_type="semantic"))
        assert isinstance(provider, SemanticSearchProvider)
        assert not provider.is_configured
        await provider.aclose()

    def test_unknown(self, store):
        """Unknown search types raise ValueError."""
        with pytest.raises(ValueError):
            create_search_provider(store, Settings(_env_file=None, search_type="vector"))
