"""Search API models."""

from typing import Any, Dict, List
from pydantic import BaseModel, Field

from .message import MessageResponse


class CitationResponse(BaseModel):
    """A citation pointing at a stored message."""

    name: str = Field(description="Citation title")
    url: str = Field(description="Deep link to the message")
    abstract: str = Field(description="Time and content preview")
    keywords: List[str] = Field(default_factory=list, description="Citation keywords")


class SearchResultResponse(BaseModel):
    """Response model for a message search."""

    conversation_id: str = Field(description="Conversation key")
    method: str = Field(description="Provider that produced the result")
    total_found: int = Field(description="Total matches before truncation")
    messages: List[MessageResponse] = Field(description="Matching messages")
    citations: List[CitationResponse] = Field(default_factory=list, description="Citations for the matches")
    debug_info: Dict[str, Any] = Field(default_factory=dict, description="Provider diagnostics")
