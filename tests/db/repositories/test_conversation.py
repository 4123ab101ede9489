"""Tests for ConversationRepository."""

import pytest

from collabbot.db.repositories import ConversationRepository


@pytest.fixture
def repo(db_conn):
    """Provide a ConversationRepository."""
    return ConversationRepository(db_conn.conn)


class TestConversationRepository:
    """SUT: ConversationRepository"""

    def test_upsert_and_get(self, repo):
        """A stored snapshot is returned as the same list."""
        messages = [{"role": "user", "content": "hi", "name": "Alice"}]
        assert repo.upsert("c1", messages)
        snapshot = repo.get("c1")
        assert snapshot.key == "c1"
        assert snapshot.messages == messages

    def test_upsert_replaces(self, repo):
        """A second upsert replaces the value and keeps created_at."""
        repo.upsert("c1", [{"content": "one"}])
        first = repo.get("c1")
        repo.upsert("c1", [{"content": "two"}])
        second = repo.get("c1")
        assert second.messages == [{"content": "two"}]
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        assert repo.count() == 1

    def test_get_missing(self, repo):
        """Unknown keys give None."""
        assert repo.get("missing") is None

    def test_keys(self, repo):
        """keys lists every stored conversation."""
        repo.upsert("a", [])
        repo.upsert("b", [])
        assert set(repo.keys()) == {"a", "b"}

    def test_delete(self, repo):
        """delete reports how many rows were removed."""
        repo.upsert("c1", [])
        assert repo.delete("c1") == 1
        assert repo.delete("c1") == 0
        assert repo.get("c1") is None
