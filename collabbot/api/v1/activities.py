"""Inbound activity route - V1."""

from fastapi import APIRouter, Depends, HTTPException

from ...models.activity import ActivityResponse, InboundActivity
from ...models.search import CitationResponse
from ...services.activity_handler import ActivityHandler

router = APIRouter(prefix="/api/v1/activities", tags=["Activities"])

# Activity handler (set by main.py)
activity_handler: ActivityHandler = None


def get_activity_handler() -> ActivityHandler:
    """Dependency to get the activity handler."""
    if activity_handler is None:
        raise HTTPException(status_code=500, detail="Activity handler not initialized")
    return activity_handler


@router.post("", response_model=ActivityResponse)
async def handle_activity(
    activity: InboundActivity,
    handler: ActivityHandler = Depends(get_activity_handler)
):
    """Record an inbound chat message and reply when it is addressed to the bot."""
    try:
        outcome = await handler.handle(activity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ActivityResponse(
        handled=outcome.handled,
        response_text=outcome.response_text,
        delegated_capability=outcome.delegated_capability,
        citations=[CitationResponse(**c.to_dict()) for c in outcome.citations],
        reply_activity_id=outcome.reply_activity_id
    )
