"""Inbound activity handling."""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.activity import InboundActivity
from ..orchestration.router import CapabilityRouter
from ..search import Citation
from ..utils.logger import get_app_logger
from ..utils.time_range import to_utc_naive, utc_now
from .context_registry import ContextRegistry, RequestContext, context_registry
from .debug_commands import DebugCommands
from .participants import ParticipantDirectory
from .store import ConversationStore


BOT_NAME = "AI Assistant"
EMPTY_REPLY = "I received your message but I'm not sure how to help with that. Could you rephrase it?"


@dataclass
class ActivityOutcome:
    """What happened to an inbound activity."""

    handled: bool
    response_text: Optional[str] = None
    delegated_capability: Optional[str] = None
    citations: List[Citation] = field(default_factory=list)
    reply_activity_id: Optional[str] = None


class ActivityHandler:
    """
    Records every chat message and answers the ones addressed to the bot.

    Group messages that do not mention the bot are only stored. Personal
    chats and mentions go through the router; the reply is stored as an
    assistant message so later summaries and searches include it.
    """

    def __init__(
        self,
        store: ConversationStore,
        router: CapabilityRouter,
        registry: Optional[ContextRegistry] = None,
        default_time_zone: str = "UTC",
        directory: Optional[ParticipantDirectory] = None
    ):
        self.store = store
        self.router = router
        self.registry = registry if registry is not None else context_registry
        self.default_time_zone = default_time_zone
        self.directory = directory
        self.debug_commands = DebugCommands(store)
        self.logger = get_app_logger("activities")

    async def handle(self, activity: InboundActivity) -> ActivityOutcome:
        """
        Process one inbound activity.

        Args:
            activity: Inbound chat message

        Returns:
            ActivityOutcome

        Raises:
            ValueError: If the activity cannot be turned into a request context
        """
        context = RequestContext.from_activity(
            activity,
            api_handle=self.directory,
            default_time_zone=self.default_time_zone
        )
        token = str(uuid.uuid4())

        with self.registry.registered(token, context):
            debug_reply = self.debug_commands.handle(activity.text, context)
            if debug_reply is not None:
                return ActivityOutcome(handled=True, response_text=debug_reply)

            self.store.append_message(
                context.conversation_key,
                "user",
                activity.text,
                name=activity.from_name,
                timestamp=activity.timestamp,
                activity_id=activity.id
            )

            if not (context.is_personal_chat or activity.mentioned):
                self.logger.debug(f"Recorded ambient message in {context.conversation_key}")
                return ActivityOutcome(handled=False)

            result = await self.router.process_request(token)

        text = result.response_text or EMPTY_REPLY
        reply_id = f"bot-{uuid.uuid4().hex}"
        self.store.append_message(
            context.conversation_key,
            "assistant",
            text,
            name=BOT_NAME,
            timestamp=max(utc_now(), to_utc_naive(context.current_date_time)),
            activity_id=reply_id
        )

        return ActivityOutcome(
            handled=True,
            response_text=text,
            delegated_capability=result.delegated_capability.value if result.delegated_capability else None,
            citations=list(result.citations),
            reply_activity_id=reply_id
        )

