"""Semantic search against a remote search index, with keyword fallback."""

from typing import Any, Dict, List, Optional

import httpx

from ..db.database_models import MessageDO
from ..errors import SearchProviderError
from ..services.store import ConversationStore
from ..utils.logger import get_app_logger
from ..utils.time_range import format_iso, parse_timestamp
from .base import BaseSearchProvider, SearchParams, SearchResult
from .keyword import KeywordSearchProvider


SELECT_FIELDS = "id,conversation_id,role,name,content,timestamp,activity_id"


def _escape(value: str) -> str:
    return value.replace("'", "''")


class SemanticSearchProvider(BaseSearchProvider):
    """
    Queries a remote index over HTTP.

    Any failure, including missing configuration, re-runs the same search
    with the local keyword provider so a caller always gets a result.
    """

    name = "semantic-search"
    fallback_method = "semantic-search (fallback to keyword)"

    def __init__(
        self,
        store: ConversationStore,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        index_name: str = "messages",
        api_version: str = "2023-11-01",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.store = store
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.api_key = api_key
        self.index_name = index_name
        self.api_version = api_version
        self.logger = get_app_logger("search")
        self.fallback = KeywordSearchProvider(store)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.api_key)

    def build_query(self, conversation_id: str, params: SearchParams) -> Dict[str, Any]:
        """Build the search request body; every query is scoped to one conversation."""
        filters = [f"conversation_id eq '{_escape(conversation_id)}'"]
        if params.start_time:
            filters.append(f"timestamp ge {format_iso(params.start_time)}")
        if params.end_time:
            filters.append(f"timestamp le {format_iso(params.end_time)}")
        participants = [p for p in params.participants if p]
        if participants:
            matches = " or ".join(f"search.ismatch('{_escape(p)}', 'name')" for p in participants)
            filters.append(f"({matches})")

        keywords = [k for k in params.keywords if k and k.strip()]
        return {
            "search": " ".join(keywords) if keywords else "*",
            "searchMode": "all",
            "queryType": "semantic",
            "semanticConfiguration": "default",
            "select": SELECT_FIELDS,
            "filter": " and ".join(filters),
            "top": params.max_results,
            "orderby": "timestamp desc",
            "count": True,
        }

    async def _execute(self, query: Dict[str, Any]) -> Any:
        url = f"{self.endpoint}/indexes/{self.index_name}/docs/search"
        try:
            response = await self.client.post(
                url,
                params={"api-version": self.api_version},
                headers={"api-key": self.api_key, "Content-Type": "application/json"},
                json=query
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SearchProviderError(f"Semantic search request failed: {e}") from e

    @staticmethod
    def _hits(data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, dict):
            raise SearchProviderError(f"Unexpected search response of type {type(data).__name__}")
        hits = data.get("value", [])
        if not isinstance(hits, list) or not all(isinstance(h, dict) for h in hits):
            raise SearchProviderError("Search response 'value' is not a list of documents")
        return hits

    def _to_message(self, hit: Dict[str, Any], conversation_id: str) -> MessageDO:
        raw_id = hit.get("id")
        try:
            message_id = int(raw_id) if raw_id is not None else None
        except (TypeError, ValueError):
            message_id = None
        score = hit.get("@search.rerankerScore")
        if score is None:
            score = hit.get("@search.score")
        return MessageDO(
            id=message_id,
            conversation_id=hit.get("conversation_id") or conversation_id,
            role=hit.get("role") or "user",
            name=hit.get("name") or "Unknown",
            content=hit.get("content") or "",
            timestamp=parse_timestamp(hit.get("timestamp")),
            activity_id=hit.get("activity_id"),
            score=float(score) if score is not None else None
        )

    async def search_messages(self, conversation_id: str, params: SearchParams) -> SearchResult:
        if not self.is_configured:
            return await self._fall_back(conversation_id, params, "Semantic search is not configured")

        query = self.build_query(conversation_id, params)
        try:
            data = await self._execute(query)
            hits = self._hits(data)
            messages = [
                self._to_message(h, conversation_id)
                for h in hits
                if h.get("timestamp") and (h.get("conversation_id") in (None, conversation_id))
            ]
            total_found = int(data.get("@odata.count", len(messages)))
        except Exception as e:
            return await self._fall_back(conversation_id, params, str(e))

        messages.sort(key=lambda m: m.timestamp, reverse=True)
        messages.sort(key=lambda m: m.score if m.score is not None else 0.0, reverse=True)
        messages = messages[:max(params.max_results, 0)]

        return SearchResult(
            messages=messages,
            total_found=total_found,
            method=self.name,
            debug_info={"query": query, "returned": len(hits)}
        )

    async def _fall_back(self, conversation_id: str, params: SearchParams, reason: str) -> SearchResult:
        self.logger.warning(f"Semantic search unavailable, using keyword search: {reason}")
        result = await self.fallback.search_messages(conversation_id, params)
        result.method = self.fallback_method
        result.debug_info["fallback_reason"] = reason
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
