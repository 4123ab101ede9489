"""Conversation REST API routes - V1."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ...config import settings
from ...db.database_models import MessageDO
from ...models.message import (
    ConversationListResponse,
    ConversationMessagesResponse,
    CreateMessageRequest,
    MessageResponse,
    SnapshotResponse
)
from ...models.search import CitationResponse, SearchResultResponse
from ...search import BaseSearchProvider, SearchParams, citations_for
from ...services.store import ConversationStore

router = APIRouter(prefix="/api/v1/conversations", tags=["Conversations"])

# Conversation store (set by main.py)
store: ConversationStore = None
# Search provider (set by main.py)
search_provider: BaseSearchProvider = None


def get_store() -> ConversationStore:
    """Dependency to get the conversation store."""
    if store is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return store


def get_search_provider() -> BaseSearchProvider:
    """Dependency to get the search provider."""
    if search_provider is None:
        raise HTTPException(status_code=500, detail="Search provider not initialized")
    return search_provider


def _to_response(message: MessageDO) -> MessageResponse:
    """Convert MessageDO to MessageResponse."""
    return MessageResponse(
        id=message.id,
        conversation_id=message.conversation_id,
        role=message.role,
        name=message.name,
        content=message.content,
        timestamp=message.timestamp,
        activity_id=message.activity_id,
        score=message.score
    )


def _messages_response(conversation_id: str, messages: List[MessageDO]) -> ConversationMessagesResponse:
    return ConversationMessagesResponse(
        conversation_id=conversation_id,
        messages=[_to_response(m) for m in messages],
        total=len(messages)
    )


@router.get("", response_model=ConversationListResponse)
async def list_conversations(conversation_store: ConversationStore = Depends(get_store)):
    """List conversations that have a stored snapshot."""
    keys = conversation_store.conversation_keys()
    return ConversationListResponse(conversations=keys, total=len(keys))


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
async def append_message(
    conversation_id: str,
    request: CreateMessageRequest,
    conversation_store: ConversationStore = Depends(get_store)
):
    """Append a message to a conversation."""
    message = conversation_store.append_message(
        conversation_id,
        request.role,
        request.content,
        name=request.name,
        timestamp=request.timestamp,
        activity_id=request.activity_id
    )
    if message is None:
        raise HTTPException(status_code=500, detail="Failed to store message")
    return _to_response(message)


@router.get("/{conversation_id}/messages", response_model=ConversationMessagesResponse)
async def get_recent_messages(
    conversation_id: str,
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Defaults to RECENT_MESSAGE_LIMIT"),
    conversation_store: ConversationStore = Depends(get_store)
):
    """Get the most recent messages of a conversation, oldest first."""
    messages = conversation_store.recent_messages(conversation_id, limit or settings.recent_message_limit)
    return _messages_response(conversation_id, messages)


@router.get("/{conversation_id}/messages/range", response_model=ConversationMessagesResponse)
async def get_messages_in_range(
    conversation_id: str,
    start_time: Optional[datetime] = Query(None, description="Inclusive lower bound"),
    end_time: Optional[datetime] = Query(None, description="Inclusive upper bound"),
    conversation_store: ConversationStore = Depends(get_store)
):
    """Get messages between two instants, oldest first."""
    messages = conversation_store.messages_in_range(conversation_id, start_time, end_time)
    return _messages_response(conversation_id, messages)


@router.put("/{conversation_id}/snapshot", response_model=SnapshotResponse)
async def save_snapshot(
    conversation_id: str,
    messages: List[CreateMessageRequest] = Body(...),
    conversation_store: ConversationStore = Depends(get_store)
):
    """Store the conversation snapshot and append messages not seen before."""
    added = conversation_store.save_snapshot(
        conversation_id,
        [m.model_dump(mode="json") for m in messages]
    )
    return SnapshotResponse(conversation_id=conversation_id, added_count=added)


@router.get("/{conversation_id}/search", response_model=SearchResultResponse)
async def search_messages(
    conversation_id: str,
    keywords: List[str] = Query([]),
    participants: List[str] = Query([]),
    start_time: Optional[datetime] = Query(None),
    end_time: Optional[datetime] = Query(None),
    max_results: int = Query(10, ge=1, le=100),
    provider: BaseSearchProvider = Depends(get_search_provider)
):
    """Search the messages of a conversation."""
    params = SearchParams(
        keywords=keywords,
        participants=participants,
        start_time=start_time,
        end_time=end_time,
        max_results=max_results
    )
    result = await provider.search_messages(conversation_id, params)
    return SearchResultResponse(
        conversation_id=conversation_id,
        method=result.method,
        total_found=result.total_found,
        messages=[_to_response(m) for m in result.messages],
        citations=[CitationResponse(**c.to_dict()) for c in citations_for(result.messages, conversation_id)],
        debug_info=result.debug_info
    )


@router.get("/{conversation_id}/debug", response_model=Dict[str, Any])
async def debug_dump(
    conversation_id: str,
    conversation_store: ConversationStore = Depends(get_store)
):
    """Describe what is stored for a conversation."""
    return conversation_store.debug_dump(conversation_id)


@router.delete("/{conversation_id}", response_model=dict)
async def clear_conversation(
    conversation_id: str,
    conversation_store: ConversationStore = Depends(get_store)
):
    """Delete the messages and snapshot of a conversation."""
    conversation_store.clear_conversation(conversation_id)
    return {
        "status": "cleared",
        "message": f"Conversation {conversation_id} cleared"
    }
