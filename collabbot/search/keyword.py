"""Local keyword search over stored messages."""

from typing import List

from ..db.database_models import MessageDO
from ..services.store import ConversationStore
from ..utils.logger import get_app_logger
from ..utils.time_range import format_iso
from .base import BaseSearchProvider, SearchParams, SearchResult


class KeywordSearchProvider(BaseSearchProvider):
    """Case-insensitive substring search against the store."""

    name = "keyword-search"

    def __init__(self, store: ConversationStore):
        self.store = store
        self.logger = get_app_logger("search")

    @staticmethod
    def _matches_keywords(message: MessageDO, keywords: List[str]) -> bool:
        if not keywords:
            return True
        content = message.content.lower()
        return any(k.lower() in content for k in keywords)

    @staticmethod
    def _matches_participants(message: MessageDO, participants: List[str]) -> bool:
        if not participants:
            return True
        name = (message.name or "").lower()
        if not name:
            return False
        return any(p.lower() in name or name in p.lower() for p in participants if p)

    async def search_messages(self, conversation_id: str, params: SearchParams) -> SearchResult:
        in_range = self.store.messages_in_range(conversation_id, params.start_time, params.end_time)
        keywords = [k for k in params.keywords if k and k.strip()]

        keyword_matches = [m for m in in_range if self._matches_keywords(m, keywords)]
        matches = [m for m in keyword_matches if self._matches_participants(m, params.participants)]

        matches.sort(key=lambda m: (m.timestamp, m.id or 0), reverse=True)
        limit = max(params.max_results, 0)

        self.logger.debug(
            f"Keyword search in {conversation_id}: {len(matches)} of {len(in_range)} messages matched"
        )

        return SearchResult(
            messages=matches[:limit],
            total_found=len(matches),
            method=self.name,
            debug_info={
                "total_messages_in_range": len(in_range),
                "keyword_matches": len(keyword_matches),
                "participant_filter": list(params.participants),
                "time_range": {
                    "start": format_iso(params.start_time) if params.start_time else None,
                    "end": format_iso(params.end_time) if params.end_time else None,
                },
            }
        )
