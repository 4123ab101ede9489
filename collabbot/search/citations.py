"""Citations and time grouping for search results."""

import json
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from ..db.database_models import MessageDO
from ..utils.time_range import to_utc_naive
from .base import Citation


DEFAULT_DEEP_LINK_BASE = "https://teams.microsoft.com/l/message"
ABSTRACT_LENGTH = 120

# (label, upper bound of message age)
TIME_GROUPS = [
    ("Today", timedelta(hours=24)),
    ("Yesterday", timedelta(hours=48)),
    ("This week", timedelta(days=7)),
    ("This month", timedelta(days=30)),
    ("Older", None),
]


def build_deep_link(conversation_id: str, activity_id: str, base: str = DEFAULT_DEEP_LINK_BASE) -> str:
    """Link that opens a message inside its chat."""
    context = quote(json.dumps({"contextType": "chat"}, separators=(",", ":")), safe="")
    return f"{base.rstrip('/')}/{quote(conversation_id, safe='')}/{quote(activity_id, safe='')}?context={context}"


def _format_time(value: datetime) -> str:
    return f"{value.strftime('%b')} {value.day}, {value.strftime('%H:%M')}"


def build_citation(
    message: MessageDO,
    conversation_id: str,
    deep_link_base: str = DEFAULT_DEEP_LINK_BASE
) -> Optional[Citation]:
    """
    Build a citation for a stored message.

    Args:
        message: Message to cite
        conversation_id: Conversation the message belongs to
        deep_link_base: Base URL of message deep links

    Returns:
        Citation, or None when the message has no platform activity id
    """
    if not message.activity_id:
        return None

    content = message.content
    if len(content) > ABSTRACT_LENGTH:
        content = content[:ABSTRACT_LENGTH] + "..."

    sender = message.name or "Unknown"
    return Citation(
        name=f"Message from {sender}",
        url=build_deep_link(conversation_id, message.activity_id, deep_link_base),
        abstract=f'{_format_time(message.timestamp)}: "{content}"',
        keywords=[sender]
    )


def citations_for(
    messages: Iterable[MessageDO],
    conversation_id: str,
    limit: int = 5,
    deep_link_base: str = DEFAULT_DEEP_LINK_BASE
) -> List[Citation]:
    """Citations for the first ``limit`` messages that can be cited."""
    citations: List[Citation] = []
    for message in messages:
        if len(citations) >= limit:
            break
        citation = build_citation(message, conversation_id, deep_link_base)
        if citation is not None:
            citations.append(citation)
    return citations


def group_messages_by_time(messages: Iterable[MessageDO], now: datetime) -> Dict[str, List[MessageDO]]:
    """
    Bucket messages by age relative to ``now``.

    Returns:
        Ordered dict of non-empty groups: Today, Yesterday, This week, This month, Older
    """
    reference = to_utc_naive(now)
    groups: Dict[str, List[MessageDO]] = {label: [] for label, _ in TIME_GROUPS}
    for message in messages:
        age = reference - message.timestamp
        for label, limit in TIME_GROUPS:
            if limit is None or age < limit:
                groups[label].append(message)
                break
    return {label: items for label, items in groups.items() if items}


def format_grouped(groups: Dict[str, List[MessageDO]], per_group: int = 3) -> str:
    """Plain-text listing of grouped messages with short previews."""
    lines: List[str] = []
    for label, items in groups.items():
        lines.append(f"{label} ({len(items)}):")
        for message in items[:per_group]:
            preview = message.content if len(message.content) <= 100 else message.content[:100] + "..."
            lines.append(f"- {message.name} at {_format_time(message.timestamp)}: {preview}")
        if len(items) > per_group:
            lines.append(f"... and {len(items) - per_group} more")
    return "\n".join(lines)
