"""Shared pytest fixtures."""

import pytest

from collabbot.config import Settings
from collabbot.db.connection import DatabaseConnection
from collabbot.services.context_registry import ContextRegistry
from collabbot.services.store import ConversationStore


@pytest.fixture
def db_conn(tmp_path):
    """Provide a fresh database connection."""
    db = DatabaseConnection(str(tmp_path / "test.db"))
    yield db
    db.close()


@pytest.fixture
def store(db_conn):
    """Provide a ConversationStore."""
    return ConversationStore(db_conn)


@pytest.fixture
def settings():
    """Provide test settings without reading a .env file."""
    return Settings(
        _env_file=None,
        search_type="keyword",
        max_function_rounds=5,
        max_citations=5,
        default_time_zone="UTC"
    )


@pytest.fixture
def registry():
    """Provide an empty context registry."""
    return ContextRegistry()

