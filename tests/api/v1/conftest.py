"""Pytest fixtures for API testing."""

import pytest
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI

from collabbot.api.v1 import activities, action_items, conversations
from collabbot.capabilities import ActionItemsCapability, CapabilityKind, SearchCapability, SummarizerCapability
from collabbot.orchestration import CapabilityRouter
from collabbot.search import KeywordSearchProvider
from collabbot.services.activity_handler import ActivityHandler
from tests.fakes import ScriptedModel


@pytest.fixture
def manager_model():
    """Scripted routing model; tests append replies before posting activities."""
    return ScriptedModel()


@pytest.fixture
def capability_model():
    """Scripted model shared by the capabilities."""
    return ScriptedModel()


@pytest.fixture(scope="function")
async def client(store, settings, registry, manager_model, capability_model):
    """Create async HTTP client with a fresh database for each test."""
    provider = KeywordSearchProvider(store)
    router = CapabilityRouter(
        manager_model,
        {
            CapabilityKind.SUMMARIZER: SummarizerCapability(store, capability_model, settings),
            CapabilityKind.ACTION_ITEMS: ActionItemsCapability(store, capability_model, settings),
            CapabilityKind.SEARCH: SearchCapability(store, capability_model, settings, provider),
        },
        registry=registry
    )

    # Inject dependencies into routers
    conversations.store = store
    conversations.search_provider = provider
    action_items.store = store
    activities.activity_handler = ActivityHandler(store, router, registry=registry)

    # Create a test app without lifespan (to avoid conflicts)
    test_app = FastAPI(title="Collaborator Bot Test")
    test_app.include_router(activities.router)
    test_app.include_router(conversations.router)
    test_app.include_router(action_items.router)

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    conversations.store = None
    conversations.search_provider = None
    action_items.store = None
    activities.activity_handler = None
