"""Inbound activity and activity response API models."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .search import CitationResponse


class MemberModel(BaseModel):
    """A conversation member sent along with an activity."""

    name: str = Field(description="Display name")
    id: Optional[str] = Field(None, description="Platform user ID")
    email: Optional[str] = Field(None, description="Email address")


class InboundActivity(BaseModel):
    """A chat message delivered by the platform."""

    id: Optional[str] = Field(None, description="Platform activity (message) ID")
    text: str = Field(description="Message text with mentions removed")
    conversation_id: str = Field(min_length=1, description="Conversation key")
    conversation_type: str = Field("groupChat", description="personal, groupChat or channel")
    from_id: str = Field(description="Sender user ID")
    from_name: str = Field("Unknown", description="Sender display name")
    timestamp: Optional[datetime] = Field(None, description="Activity time")
    mentioned: bool = Field(False, description="Whether the bot was mentioned")
    time_zone: Optional[str] = Field(None, description="Sender's IANA time zone")
    members: List[MemberModel] = Field(default_factory=list, description="Conversation roster")


class ActivityResponse(BaseModel):
    """Result of handling an inbound activity."""

    handled: bool = Field(description="Whether the bot replied")
    response_text: Optional[str] = Field(None, description="Reply text")
    delegated_capability: Optional[str] = Field(None, description="Capability that produced the reply")
    citations: List[CitationResponse] = Field(default_factory=list, description="Message citations")
    reply_activity_id: Optional[str] = Field(None, description="ID recorded for the reply")
