"""Action item REST API routes - V1."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from ...db.database_models import ActionItemDO, ActionItemStatus
from ...models.action_item import (
    ActionItemListResponse,
    ActionItemResponse,
    ActionItemSummaryResponse,
    CreateActionItemRequest,
    UpdateStatusRequest
)
from ...services.store import ConversationStore
from ...utils.time_range import resolve_deadline, utc_now

router = APIRouter(prefix="/api/v1/action-items", tags=["Action Items"])

# Conversation store (set by main.py)
store: ConversationStore = None


def get_store() -> ConversationStore:
    """Dependency to get the conversation store."""
    if store is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return store


def _to_response(item: ActionItemDO) -> ActionItemResponse:
    """Convert ActionItemDO to ActionItemResponse."""
    return ActionItemResponse(
        id=item.id,
        conversation_id=item.conversation_id,
        title=item.title,
        description=item.description,
        assigned_to=item.assigned_to,
        assigned_to_id=item.assigned_to_id,
        assigned_by=item.assigned_by,
        assigned_by_id=item.assigned_by_id,
        status=item.status,
        priority=item.priority,
        due_date=item.due_date,
        source_message_ids=item.source_message_ids,
        created_at=item.created_at,
        updated_at=item.updated_at
    )


@router.get("", response_model=ActionItemListResponse)
async def list_action_items(
    conversation_id: Optional[str] = Query(None, description="Filter by conversation"),
    assigned_to: Optional[str] = Query(None, description="Filter by assignee name"),
    assigned_to_id: Optional[str] = Query(None, description="Filter by assignee user ID"),
    status: Optional[ActionItemStatus] = Query(None, description="Filter by status"),
    conversation_store: ConversationStore = Depends(get_store)
):
    """List action items, optionally filtered."""
    status_value = status.value if status else None
    if assigned_to_id:
        items = conversation_store.action_items_by_assignee_id(assigned_to_id, status_value)
    elif assigned_to:
        items = conversation_store.action_items_by_assignee_name(assigned_to, status_value)
    elif conversation_id:
        items = conversation_store.action_items_by_conversation(conversation_id, status_value)
    else:
        items = conversation_store.all_action_items(status_value)

    if conversation_id:
        items = [i for i in items if i.conversation_id == conversation_id]

    return ActionItemListResponse(action_items=[_to_response(i) for i in items], total=len(items))


@router.get("/summary", response_model=ActionItemSummaryResponse)
async def action_items_summary(conversation_store: ConversationStore = Depends(get_store)):
    """Count action items by status and priority."""
    return ActionItemSummaryResponse(**conversation_store.action_items_summary())


@router.get("/{item_id}", response_model=ActionItemResponse)
async def get_action_item(item_id: int, conversation_store: ConversationStore = Depends(get_store)):
    """Get an action item."""
    item = conversation_store.get_action_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail=f"Action item not found: {item_id}")
    return _to_response(item)


@router.post("", response_model=ActionItemResponse, status_code=201)
async def create_action_item(
    request: CreateActionItemRequest,
    conversation_store: ConversationStore = Depends(get_store)
):
    """Create a pending action item."""
    due_date = request.due_date
    if due_date:
        due_date = resolve_deadline(due_date, utc_now()) or due_date

    item = conversation_store.create_action_item(
        conversation_id=request.conversation_id,
        title=request.title,
        description=request.description,
        assigned_to=request.assigned_to,
        assigned_to_id=request.assigned_to_id,
        assigned_by=request.assigned_by,
        assigned_by_id=request.assigned_by_id,
        priority=request.priority,
        due_date=due_date,
        source_message_ids=request.source_message_ids
    )
    if item is None:
        raise HTTPException(status_code=500, detail="Failed to create action item")
    return _to_response(item)


@router.patch("/{item_id}/status", response_model=ActionItemResponse)
async def update_action_item_status(
    item_id: int,
    request: UpdateStatusRequest,
    conversation_store: ConversationStore = Depends(get_store)
):
    """Move an action item to a new status."""
    item = conversation_store.get_action_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail=f"Action item not found: {item_id}")

    if not conversation_store.update_action_item_status(item_id, request.status):
        raise HTTPException(
            status_code=409,
            detail=f"Cannot change status from {item.status.value} to {request.status.value}"
        )
    return _to_response(conversation_store.get_action_item(item_id))


@router.delete("", response_model=dict)
async def clear_action_items(
    conversation_id: str = Query(..., min_length=1),
    conversation_store: ConversationStore = Depends(get_store)
):
    """Delete the action items of a conversation."""
    deleted = conversation_store.clear_action_items(conversation_id)
    return {"status": "deleted", "deleted_count": deleted}
