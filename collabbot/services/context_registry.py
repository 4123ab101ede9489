"""Per-request context and the registry that shares it with capabilities."""

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.activity import InboundActivity
from ..utils.logger import get_app_logger
from ..utils.time_range import is_valid_zone, now_in_zone
from .participants import Participant, ParticipantDirectory, StaticParticipantDirectory


class RequestContext(BaseModel):
    """Immutable facts about one inbound request."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    text: str = Field("", description="Request text")
    conversation_key: str = Field(min_length=1, description="Conversation key")
    user_id: str = Field(description="Requesting user ID")
    user_name: str = Field("Unknown", description="Requesting user display name")
    is_personal_chat: bool = Field(False, description="One-to-one chat with the bot")
    current_date_time: datetime = Field(description="Reference instant for relative time phrases")
    time_zone: str = Field("UTC", description="Requesting user's IANA time zone")
    activity_id: Optional[str] = Field(None, description="Platform ID of the request message")
    api_handle: Optional[ParticipantDirectory] = Field(None, exclude=True, description="Member lookup")

    @field_validator("current_date_time")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("time_zone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        if not is_valid_zone(value):
            raise ValueError(f"Unknown time zone: {value}")
        return value

    def now(self) -> datetime:
        """The reference instant in the user's zone."""
        return now_in_zone(self.time_zone, self.current_date_time)

    def date_label(self) -> str:
        """e.g. ``2024-03-07 14:05 (Thursday)``."""
        local = self.now()
        return f"{local.strftime('%Y-%m-%d %H:%M')} ({local.strftime('%A')})"

    @classmethod
    def from_activity(
        cls,
        activity: InboundActivity,
        api_handle: Optional[ParticipantDirectory] = None,
        default_time_zone: str = "UTC"
    ) -> "RequestContext":
        """
        Build a context from an inbound activity.

        An unknown or missing time zone falls back to ``default_time_zone``.
        When no directory is given, the roster sent with the activity is used.
        """
        zone = activity.time_zone if activity.time_zone and is_valid_zone(activity.time_zone) else default_time_zone
        if api_handle is None and activity.members:
            api_handle = StaticParticipantDirectory(
                Participant(name=m.name, id=m.id, email=m.email) for m in activity.members
            )
        return cls(
            text=activity.text,
            conversation_key=activity.conversation_id,
            user_id=activity.from_id,
            user_name=activity.from_name,
            is_personal_chat=activity.conversation_type == "personal",
            current_date_time=activity.timestamp or now_in_zone(zone),
            time_zone=zone,
            activity_id=activity.id,
            api_handle=api_handle
        )


class ContextRegistry:
    """Thread-safe token -> RequestContext map; the last write for a token wins."""

    def __init__(self):
        self._contexts: Dict[str, RequestContext] = {}
        self._lock = threading.Lock()
        self.logger = get_app_logger("context")

    def put(self, token: str, context: RequestContext) -> None:
        with self._lock:
            self._contexts[token] = context

    def get(self, token: str) -> Optional[RequestContext]:
        with self._lock:
            context = self._contexts.get(token)
        if context is None:
            self.logger.warning(f"No request context for token {token}")
        return context

    def remove(self, token: str) -> None:
        with self._lock:
            self._contexts.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._contexts)

    def __contains__(self, token: str) -> bool:
        with self._lock:
            return token in self._contexts

    @contextmanager
    def registered(self, token: str, context: RequestContext) -> Iterator[str]:
        """Register ``context`` for the duration of a ``with`` block."""
        self.put(token, context)
        try:
            yield token
        finally:
            self.remove(token)


# Process-wide registry
context_registry = ContextRegistry()
