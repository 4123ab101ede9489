"""Action item API models."""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from ..db.database_models import ActionItemPriority, ActionItemStatus


class CreateActionItemRequest(BaseModel):
    """Request model for creating an action item."""

    conversation_id: str = Field(min_length=1, description="Conversation key")
    title: str = Field(min_length=1, description="Short task title")
    description: str = Field("", description="Task details")
    assigned_to: str = Field(min_length=1, description="Assignee display name")
    assigned_to_id: Optional[str] = Field(None, description="Assignee user ID")
    assigned_by: str = Field(min_length=1, description="Creator display name")
    assigned_by_id: Optional[str] = Field(None, description="Creator user ID")
    priority: ActionItemPriority = Field(ActionItemPriority.MEDIUM, description="Priority")
    due_date: Optional[str] = Field(None, description="Due date (ISO or relative, e.g. 'tomorrow')")
    source_message_ids: List[int] = Field(default_factory=list, description="Messages the item came from")


class UpdateStatusRequest(BaseModel):
    """Request model for an action item status change."""

    status: ActionItemStatus = Field(description="Target status")


class ActionItemResponse(BaseModel):
    """A stored action item."""

    id: int = Field(description="Action item ID")
    conversation_id: str = Field(description="Conversation key")
    title: str = Field(description="Short task title")
    description: str = Field(description="Task details")
    assigned_to: str = Field(description="Assignee display name")
    assigned_to_id: Optional[str] = Field(None, description="Assignee user ID")
    assigned_by: str = Field(description="Creator display name")
    assigned_by_id: Optional[str] = Field(None, description="Creator user ID")
    status: ActionItemStatus = Field(description="Lifecycle status")
    priority: ActionItemPriority = Field(description="Priority")
    due_date: Optional[str] = Field(None, description="Due date")
    source_message_ids: List[int] = Field(default_factory=list, description="Source messages")
    created_at: datetime = Field(description="Creation time (UTC)")
    updated_at: datetime = Field(description="Last status change (UTC)")


class ActionItemListResponse(BaseModel):
    """Response model for action item listings."""

    action_items: List[ActionItemResponse] = Field(description="Action items")
    total: int = Field(description="Number of action items")


class ActionItemSummaryResponse(BaseModel):
    """Counts of action items."""

    total: int = Field(description="Total action items")
    by_status: Dict[str, int] = Field(description="Counts per status")
    by_priority: Dict[str, int] = Field(description="Counts per priority")
