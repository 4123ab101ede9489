"""Chat commands for inspecting and resetting stored state."""

import json
from typing import Callable, Dict, Optional

from ..utils.logger import get_app_logger
from .context_registry import RequestContext
from .store import ConversationStore


HELP_TEXT = """Debug commands:
- msg.db: show what is stored for this conversation
- clear.convo: delete this conversation's message history
- action.items: list this conversation's action items
- clear.actions: delete this conversation's action items
- personal.actions: list action items assigned to you
- help.debug: show this help"""


def _code_block(data) -> str:
    return "```json\n" + json.dumps(data, indent=2, default=str) + "\n```"


class DebugCommands:
    """Answers the ``msg.db``-style commands typed into a chat."""

    def __init__(self, store: ConversationStore):
        self.store = store
        self.logger = get_app_logger("debug")
        self._commands: Dict[str, Callable[[RequestContext], str]] = {
            "msg.db": self._dump,
            "clear.convo": self._clear_conversation,
            "action.items": self._action_items,
            "clear.actions": self._clear_action_items,
            "personal.actions": self._personal_action_items,
            "help.debug": self._help,
        }

    def is_command(self, text: str) -> bool:
        return text.strip().lower() in self._commands

    def handle(self, text: str, context: RequestContext) -> Optional[str]:
        """
        Run a debug command.

        Returns:
            Reply text, or None when ``text`` is not a debug command
        """
        command = self._commands.get(text.strip().lower())
        if command is None:
            return None
        self.logger.info(f"Debug command '{text.strip()}' in {context.conversation_key}")
        return command(context)

    def _dump(self, context: RequestContext) -> str:
        return _code_block(self.store.debug_dump(context.conversation_key))

    def _clear_conversation(self, context: RequestContext) -> str:
        self.store.clear_conversation(context.conversation_key)
        return "This conversation's message history has been cleared."

    def _action_items(self, context: RequestContext) -> str:
        items = self.store.action_items_by_conversation(context.conversation_key)
        return _code_block({
            "conversation_id": context.conversation_key,
            "action_items": [i.to_dict() for i in items],
            "summary": self.store.action_items_summary(),
        })

    def _clear_action_items(self, context: RequestContext) -> str:
        deleted = self.store.clear_action_items(context.conversation_key)
        return f"Deleted {deleted} action items from this conversation."

    def _personal_action_items(self, context: RequestContext) -> str:
        items = self.store.action_items_by_assignee_id(context.user_id)
        return _code_block({"user_id": context.user_id, "action_items": [i.to_dict() for i in items]})

    def _help(self, context: RequestContext) -> str:
        return HELP_TEXT
