"""Message API models."""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class CreateMessageRequest(BaseModel):
    """Request model for appending a message."""

    role: Literal["user", "assistant"] = Field("user", description="Message role")
    content: str = Field(description="Message text")
    name: Optional[str] = Field(None, description="Sender display name")
    timestamp: Optional[datetime] = Field(None, description="Message time, defaults to now")
    activity_id: Optional[str] = Field(None, description="Platform message ID")


class MessageResponse(BaseModel):
    """A stored message."""

    id: Optional[int] = Field(None, description="Message ID")
    conversation_id: str = Field(description="Conversation key")
    role: str = Field(description="Message role")
    name: str = Field(description="Sender display name")
    content: str = Field(description="Message text")
    timestamp: datetime = Field(description="Message time (UTC)")
    activity_id: Optional[str] = Field(None, description="Platform message ID")
    score: Optional[float] = Field(None, description="Relevance score for search results")


class ConversationMessagesResponse(BaseModel):
    """Response model for conversation messages."""

    conversation_id: str = Field(description="Conversation key")
    messages: List[MessageResponse] = Field(description="List of messages")
    total: int = Field(description="Number of messages returned")


class SnapshotResponse(BaseModel):
    """Response model for saving a conversation snapshot."""

    conversation_id: str = Field(description="Conversation key")
    added_count: int = Field(description="Messages appended from the snapshot")


class ConversationListResponse(BaseModel):
    """Stored conversation keys."""

    conversations: List[str] = Field(description="Conversation keys, most recently updated first")
    total: int = Field(description="Number of conversations")
