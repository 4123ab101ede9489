"""Action item extraction and management."""

import json
from typing import Any, Dict, List, Optional, Tuple

from ..db.database_models import ActionItemDO, ActionItemPriority, ActionItemStatus
from ..llm import ChatPrompt, error_payload
from ..prompts import ACTION_ITEMS_INSTRUCTIONS
from ..services.context_registry import RequestContext
from ..services.participants import Participant
from ..utils.time_range import resolve_deadline
from .base import BaseCapability, CapabilityKind, CapabilityRequest, CapabilityResult


PRIORITIES = [p.value for p in ActionItemPriority]
STATUSES = [s.value for s in ActionItemStatus]
MAX_ANALYZED_MESSAGES = 200

ANALYZE_PARAMETERS = {
    "type": "object",
    "properties": {
        "start_time": {"type": "string", "description": "ISO start time; defaults to the request window"},
        "end_time": {"type": "string", "description": "ISO end time; defaults to the request window"},
    },
}

CREATE_PARAMETERS = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "description": "Short task title"},
        "description": {"type": "string", "description": "What needs to be done"},
        "assigned_to": {"type": "string", "description": "Name of the member responsible"},
        "priority": {"type": "string", "enum": PRIORITIES},
        "due_date": {"type": "string", "description": "Due date as stated, e.g. 'tomorrow' or '3/15'"},
        "source_message_ids": {"type": "array", "items": {"type": "integer"}},
    },
    "required": ["title", "description", "assigned_to"],
}

LIST_PARAMETERS = {
    "type": "object",
    "properties": {
        "assigned_to": {"type": "string", "description": "Only items assigned to this member"},
        "status": {"type": "string", "enum": STATUSES},
    },
}

UPDATE_PARAMETERS = {
    "type": "object",
    "properties": {
        "action_item_id": {"type": "integer"},
        "new_status": {"type": "string", "enum": STATUSES},
    },
    "required": ["action_item_id", "new_status"],
}


def _item_summary(item: ActionItemDO) -> Dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "assigned_to": item.assigned_to,
        "status": item.status.value,
        "priority": item.priority.value,
        "due_date": item.due_date,
    }


class ActionItemsCapability(BaseCapability):
    """Finds, creates, lists and updates action items through model function calls."""

    kind = CapabilityKind.ACTION_ITEMS

    async def fetch_participants(self, context: RequestContext) -> List[Participant]:
        """Members of the conversation; empty for personal chats or when the lookup fails."""
        if context.is_personal_chat or context.api_handle is None:
            return []
        try:
            return await context.api_handle.list_members(context.conversation_key)
        except Exception as e:
            self.logger.warning(f"Could not list members of {context.conversation_key}: {e}")
            return []

    @staticmethod
    def resolve_assignee(
        assigned_to: str,
        context: RequestContext,
        participants: List[Participant]
    ) -> Tuple[str, Optional[str]]:
        """
        Pick the assignee for a new item.

        Returns:
            (name, user id); the id is None when no member matches the name
        """
        if context.is_personal_chat:
            return context.user_name, context.user_id
        wanted = (assigned_to or "").strip().lower()
        for participant in participants:
            if participant.name.lower() == wanted:
                return participant.name, participant.id
        return (assigned_to or "").strip(), None

    async def run(self, request: CapabilityRequest) -> CapabilityResult:
        context = request.context
        window = self.resolve_window(request)
        participants = await self.fetch_participants(context)
        conversation_id = context.conversation_key

        async def analyze(args: Dict[str, Any]) -> str:
            start = args.get("start_time") or window.start
            end = args.get("end_time") or window.end
            messages = self.store.messages_in_range(conversation_id, start, end)[-MAX_ANALYZED_MESSAGES:]
            existing = self.store.action_items_by_conversation(conversation_id)
            return json.dumps({
                "status": "success",
                "timespan": window.description,
                "message_count": len(messages),
                "messages": [
                    {"id": m.id, "name": m.name, "content": m.content, "timestamp": m.timestamp.isoformat()}
                    for m in messages
                ],
                "available_members": [p.name for p in participants],
                "existing_action_items": [_item_summary(i) for i in existing],
            })

        async def create(args: Dict[str, Any]) -> str:
            assignee = self.resolve_assignee(args.get("assigned_to", ""), context, participants)
            if assignee[1] is None:
                self.logger.info(f"No member named '{assignee[0]}' in {conversation_id}; storing the name only")

            due_text = args.get("due_date")
            due_date = resolve_deadline(due_text, context.now()) if due_text else None
            if due_text and due_date is None:
                due_date = due_text

            try:
                item = self.store.create_action_item(
                    conversation_id=conversation_id,
                    title=args["title"],
                    description=args.get("description", ""),
                    assigned_to=assignee[0],
                    assigned_to_id=assignee[1],
                    assigned_by=context.user_name,
                    assigned_by_id=context.user_id,
                    priority=args.get("priority") or ActionItemPriority.MEDIUM.value,
                    due_date=due_date,
                    source_message_ids=args.get("source_message_ids") or []
                )
            except ValueError:
                return error_payload(f"Invalid priority '{args.get('priority')}'; use one of {', '.join(PRIORITIES)}")

            if item is None:
                return error_payload("The action item could not be saved")
            return json.dumps({"status": "success", "action_item": _item_summary(item)})

        async def list_items(args: Dict[str, Any]) -> str:
            status = args.get("status")
            if status and status not in STATUSES:
                return error_payload(f"Unknown status '{status}'")

            if context.is_personal_chat:
                items = self.store.action_items_by_assignee_id(context.user_id, status)
            elif args.get("assigned_to"):
                items = [
                    i for i in self.store.action_items_by_assignee_name(args["assigned_to"], status)
                    if i.conversation_id == conversation_id
                ]
            else:
                items = self.store.action_items_by_conversation(conversation_id, status)

            return json.dumps({"status": "success", "count": len(items), "action_items": [_item_summary(i) for i in items]})

        async def update(args: Dict[str, Any]) -> str:
            try:
                item_id = int(args["action_item_id"])
            except (KeyError, TypeError, ValueError):
                return error_payload("action_item_id must be an integer")
            new_status = args.get("new_status", "")

            item = self.store.get_action_item(item_id)
            if item is None or (not context.is_personal_chat and item.conversation_id != conversation_id):
                return error_payload(f"Action item {item_id} not found")
            if context.is_personal_chat and item.assigned_to_id != context.user_id:
                return error_payload(f"Action item {item_id} is not assigned to you")

            if not self.store.update_action_item_status(item_id, new_status):
                message = f"Cannot change action item {item_id} from {item.status.value} to {new_status}"
                if item.status == ActionItemStatus.PENDING and new_status == ActionItemStatus.COMPLETED.value:
                    message += "; move it to in_progress first, then to completed"
                return error_payload(message)
            return json.dumps({"status": "success", "action_item_id": item_id, "new_status": new_status})

        async def members(args: Dict[str, Any]) -> str:
            return json.dumps({"status": "success", "members": [p.to_dict() for p in participants]})

        instructions = ACTION_ITEMS_INSTRUCTIONS.format(
            current_date_time=context.date_label(),
            time_zone=context.time_zone,
            chat_type=self.chat_type(context),
            user_name=context.user_name,
            timespan=window.description
        )
        prompt = (
            ChatPrompt(self.model, instructions, max_rounds=self.settings.max_function_rounds)
            .function("analyze_for_action_items", "Read the conversation to find tasks and commitments",
                      ANALYZE_PARAMETERS, analyze)
            .function("create_action_item", "Create a new action item", CREATE_PARAMETERS, create)
            .function("get_action_items", "List action items", LIST_PARAMETERS, list_items)
            .function("update_action_item_status", "Change the status of an action item",
                      UPDATE_PARAMETERS, update)
            .function("get_chat_members", "List the members of this chat", None, members)
        )

        text = await prompt.send(request.user_request)
        return CapabilityResult(text=text or "I've processed your action item request.")
