"""Conversation summaries."""

from collections import Counter
from datetime import timezone
from typing import Any, Dict, List

from ..db.database_models import MessageDO
from ..llm import ChatPrompt
from ..prompts import SUMMARIZER_INSTRUCTIONS
from ..utils.time_range import get_zone
from .base import BaseCapability, CapabilityKind, CapabilityRequest, CapabilityResult


MAX_TRANSCRIPT_MESSAGES = 200


def conversation_stats(messages: List[MessageDO]) -> Dict[str, Any]:
    """Counts by participant and role plus first/last timestamps."""
    if not messages:
        return {"total_messages": 0, "participants": [], "by_participant": {}, "by_role": {}}
    by_participant = Counter(m.name for m in messages)
    return {
        "total_messages": len(messages),
        "participants": sorted(by_participant),
        "by_participant": dict(by_participant),
        "by_role": dict(Counter(m.role for m in messages)),
        "oldest": messages[0].timestamp.isoformat(),
        "newest": messages[-1].timestamp.isoformat(),
    }


def format_transcript(messages: List[MessageDO], zone_name: str) -> str:
    """One line per message, timestamps in the reader's zone."""
    zone = get_zone(zone_name)
    lines = []
    for message in messages:
        local = message.timestamp.replace(tzinfo=timezone.utc).astimezone(zone)
        lines.append(f"[{local.strftime('%Y-%m-%d %H:%M')}] {message.name} ({message.role}): {message.content}")
    return "\n".join(lines)


class SummarizerCapability(BaseCapability):
    """Summarizes the messages of a time window."""

    kind = CapabilityKind.SUMMARIZER

    async def run(self, request: CapabilityRequest) -> CapabilityResult:
        context = request.context
        window = self.resolve_window(request)
        messages = [
            m for m in self.store.messages_in_range(context.conversation_key, window.start, window.end)
            if not (context.activity_id and m.activity_id == context.activity_id)
        ]

        if not messages:
            self.logger.info(f"No messages to summarize in {context.conversation_key} for {window.description}")
            return CapabilityResult(text=f"I couldn't find any messages from {window.description} to summarize.")

        messages = messages[-MAX_TRANSCRIPT_MESSAGES:]
        stats = conversation_stats(messages)
        instructions = SUMMARIZER_INSTRUCTIONS.format(
            current_date_time=context.date_label(),
            time_zone=context.time_zone,
            timespan=window.description
        )
        prompt = ChatPrompt(self.model, instructions, max_rounds=1)
        text = await prompt.send(
            f"Request: {request.user_request}\n\n"
            f"Participants: {', '.join(stats['participants'])} "
            f"({stats['total_messages']} messages)\n\n"
            f"Messages:\n{format_transcript(messages, context.time_zone)}"
        )

        self.logger.info(f"Summarized {len(messages)} messages from {context.conversation_key}")
        if not text:
            text = f"I found {len(messages)} messages from {window.description} but couldn't produce a summary."
        return CapabilityResult(text=text)
