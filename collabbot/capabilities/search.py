"""Finding earlier messages."""

import json
from typing import Any, Dict, List, Optional

from ..config import Settings
from ..llm import ChatPrompt, LanguageModel, error_payload
from ..prompts import SEARCH_INSTRUCTIONS
from ..search import BaseSearchProvider, Citation, SearchParams, citations_for, group_messages_by_time
from ..search.citations import format_grouped
from ..services.store import ConversationStore
from ..utils.time_range import TimeRange, parse_timestamp
from .base import BaseCapability, CapabilityKind, CapabilityRequest, CapabilityResult


SEARCH_PARAMETERS = {
    "type": "object",
    "properties": {
        "keywords": {"type": "array", "items": {"type": "string"}, "description": "Words to look for"},
        "participants": {"type": "array", "items": {"type": "string"}, "description": "Sender names"},
        "start_time": {"type": "string", "description": "ISO start time"},
        "end_time": {"type": "string", "description": "ISO end time"},
        "max_results": {"type": "integer", "minimum": 1, "maximum": 50},
    },
    "required": ["keywords"],
}


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


class SearchCapability(BaseCapability):
    """Searches the conversation and cites the messages it finds."""

    kind = CapabilityKind.SEARCH

    def __init__(
        self,
        store: ConversationStore,
        model: LanguageModel,
        settings: Settings,
        provider: BaseSearchProvider
    ):
        super().__init__(store, model, settings)
        self.provider = provider

    def resolve_window(self, request: CapabilityRequest) -> Optional[TimeRange]:
        # Without a phrase, search the whole history
        return request.time_range

    async def run(self, request: CapabilityRequest) -> CapabilityResult:
        context = request.context
        conversation_id = context.conversation_key
        window = self.resolve_window(request)
        citations: List[Citation] = []
        summaries: List[str] = []

        async def search(args: Dict[str, Any]) -> str:
            try:
                start = parse_timestamp(args.get("start_time")) or (window.start if window else None)
                end = parse_timestamp(args.get("end_time")) or (window.end if window else None)
            except ValueError as e:
                return error_payload(f"Invalid time bound: {e}")

            params = SearchParams(
                keywords=_as_list(args.get("keywords")),
                participants=_as_list(args.get("participants")),
                start_time=start,
                end_time=end,
                max_results=int(args.get("max_results") or 10)
            )
            result = await self.provider.search_messages(conversation_id, params)
            messages = [
                m for m in result.messages
                if not (context.activity_id and m.activity_id == context.activity_id)
            ]

            known = {c.url for c in citations}
            room = self.settings.max_citations - len(citations)
            if room > 0:
                for citation in citations_for(messages, conversation_id, limit=room,
                                              deep_link_base=self.settings.deep_link_base):
                    if citation.url not in known:
                        citations.append(citation)

            listing = format_grouped(group_messages_by_time(messages, context.current_date_time))
            summary = f"Found {len(messages)} matching messages" + (f":\n{listing}" if listing else ".")
            summaries.append(summary)

            self.logger.info(
                f"Search in {conversation_id} via {result.method}: {len(messages)} of {result.total_found} returned"
            )
            return json.dumps({
                "status": "success",
                "method": result.method,
                "total_found": result.total_found,
                "messages": [
                    {
                        "id": m.id,
                        "name": m.name,
                        "content": m.content,
                        "timestamp": m.timestamp.isoformat(),
                        "score": m.score,
                    }
                    for m in messages
                ],
                "grouped": listing,
            })

        instructions = SEARCH_INSTRUCTIONS.format(
            current_date_time=context.date_label(),
            time_zone=context.time_zone,
            timespan=window.description if window else "the whole conversation"
        )
        prompt = ChatPrompt(self.model, instructions, max_rounds=self.settings.max_function_rounds)
        prompt.function("search_messages", "Search messages in this conversation", SEARCH_PARAMETERS, search)

        text = await prompt.send(request.user_request)
        if not text:
            text = "\n\n".join(summaries) or "I couldn't find any matching messages."
        return CapabilityResult(text=text, citations=citations)
