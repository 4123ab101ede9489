"""Tests for KeywordSearchProvider."""

import pytest
from datetime import datetime

from collabbot.search import KeywordSearchProvider, SearchParams


@pytest.fixture
def provider(store):
    """Provider over a store with a small conversation."""
    rows = [
        ("Alice", "The deploy is scheduled for Friday", "2024-03-05T09:00:00Z"),
        ("Bob", "Deploy checklist is ready", "2024-03-06T10:00:00Z"),
        ("Carol", "Lunch anyone?", "2024-03-06T12:00:00Z"),
        ("Bob", "Budget review moved to Monday", "2024-03-07T08:00:00Z"),
    ]
    for name, content, timestamp in rows:
        store.append_message("c1", "user", content, name=name, timestamp=timestamp)
    store.append_message("c2", "user", "deploy in another chat", name="Dave", timestamp="2024-03-06T11:00:00Z")
    return KeywordSearchProvider(store)


class TestKeywordSearchProvider:
    """SUT: KeywordSearchProvider.search_messages"""

    async def test_case_insensitive_any_keyword(self, provider):
        """Any keyword matches, ignoring case, newest first."""
        result = await provider.search_messages("c1", SearchParams(keywords=["DEPLOY", "budget"]))
        assert [m.name for m in result.messages] == ["Bob", "Bob", "Alice"]
        assert result.total_found == 3
        assert result.method == "keyword-search"

    async def test_scoped_to_conversation(self, provider):
        """Messages of other conversations are never returned."""
        result = await provider.search_messages("c1", SearchParams(keywords=["another"]))
        assert result.messages == []

    async def test_participant_filter(self, provider):
        """Participant names match by partial, case-insensitive containment."""
        result = await provider.search_messages("c1", SearchParams(keywords=["deploy"], participants=["bo"]))
        assert [m.content for m in result.messages] == ["Deploy checklist is ready"]

    async def test_time_range(self, provider):
        """Only messages within the range are searched."""
        params = SearchParams(
            keywords=["deploy"],
            start_time=datetime(2024, 3, 6, 0, 0),
            end_time=datetime(2024, 3, 7, 0, 0)
        )
        result = await provider.search_messages("c1", params)
        assert [m.name for m in result.messages] == ["Bob"]
        assert result.debug_info["total_messages_in_range"] == 2
        assert result.debug_info["time_range"]["start"] == "2024-03-06T00:00:00.000Z"

    async def test_max_results(self, provider):
        """Results are truncated while total_found counts every match."""
        result = await provider.search_messages("c1", SearchParams(keywords=[], max_results=2))
        assert len(result.messages) == 2
        assert result.total_found == 4

    async def test_no_keywords_matches_all(self, provider):
        """Blank keywords do not filter."""
        result = await provider.search_messages("c1", SearchParams(keywords=["  "]))
        assert result.total_found == 4
