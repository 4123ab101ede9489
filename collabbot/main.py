"""FastAPI main application."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1 import activities, action_items, conversations
from .capabilities import ActionItemsCapability, CapabilityKind, SearchCapability, SummarizerCapability
from .config import Settings, settings
from .db import DatabaseConnection
from .llm import LanguageModel, create_model
from .orchestration import CapabilityRouter
from .search import BaseSearchProvider, create_search_provider
from .services import ConversationStore, context_registry
from .services.activity_handler import ActivityHandler
from .utils.logger import init_app_logger


# Initialize logger
logger = init_app_logger(settings)


def _mask(secret: Optional[str]) -> str:
    if not secret:
        return "Not set"
    return secret[:4] + "..." + secret[-4:] if len(secret) > 12 else "***"


def build_router(
    app_settings: Settings,
    store: ConversationStore,
    provider: BaseSearchProvider,
    manager_model: LanguageModel,
    capability_model: LanguageModel
) -> CapabilityRouter:
    """Wire every capability to a router."""
    capabilities = {
        CapabilityKind.SUMMARIZER: SummarizerCapability(store, capability_model, app_settings),
        CapabilityKind.ACTION_ITEMS: ActionItemsCapability(store, capability_model, app_settings),
        CapabilityKind.SEARCH: SearchCapability(store, capability_model, app_settings, provider),
    }
    return CapabilityRouter(
        manager_model,
        capabilities,
        registry=context_registry,
        max_rounds=app_settings.max_function_rounds
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    logger.info("=" * 70)
    logger.info("Starting Collaborator Bot...")
    logger.info("=" * 70)
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Database: {settings.database_path}")
    logger.info(f"  Log Level: {settings.log_level}")
    logger.info(f"  Search: {settings.search_type}")
    logger.info(f"  Manager Model: {settings.manager_model}")
    logger.info(f"  Capability Model: {settings.llm_model}")
    logger.info(f"  LLM Endpoint: {settings.llm_endpoint or 'default'}")
    logger.info(f"  LLM API Key: {_mask(settings.llm_api_key)}")

    db = DatabaseConnection(settings.database_path)
    store = ConversationStore(db)
    provider = create_search_provider(store, settings)

    conversations.store = store
    conversations.search_provider = provider
    action_items.store = store

    if settings.llm_api_key:
        router = build_router(
            settings,
            store,
            provider,
            create_model(settings, "manager"),
            create_model(settings, "capability")
        )
        activities.activity_handler = ActivityHandler(
            store,
            router,
            registry=context_registry,
            default_time_zone=settings.default_time_zone
        )
    else:
        logger.error("LLM_API_KEY is not set; /api/v1/activities is disabled")

    logger.info("Collaborator Bot started successfully")

    yield

    logger.info("Shutting down Collaborator Bot...")
    activities.activity_handler = None
    conversations.store = None
    conversations.search_provider = None
    action_items.store = None
    await provider.aclose()
    db.close()
    logger.info("Collaborator Bot shut down successfully")


# Create FastAPI application
app = FastAPI(
    title="Collaborator Bot",
    description="Conversation memory and capability orchestration for group chats",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(activities.router)
app.include_router(conversations.router)
app.include_router(action_items.router)


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "Collaborator Bot"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "collabbot.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
