"""Conversation store - the persistence facade used by the rest of the bot."""

import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from ..db import DatabaseConnection, ConversationRepository, MessageRepository, ActionItemRepository
from ..db.database_models import (
    ActionItemDO,
    ActionItemPriority,
    ActionItemStatus,
    MessageDO,
    MessageRole,
)
from ..utils.logger import get_app_logger
from ..utils.time_range import parse_timestamp, utc_now


TimeBound = Union[datetime, str, None]


class ConversationStore:
    """
    Durable storage for messages, snapshots and action items.

    All operations go through a single re-entrant lock, so id assignment and
    multi-statement writes stay atomic when handlers run concurrently.
    Read failures come back as empty results; only the schema bootstrap in
    DatabaseConnection raises.
    """

    def __init__(self, db: DatabaseConnection):
        """
        Initialize the store.

        Args:
            db: Open database connection
        """
        self.db = db
        self.logger = get_app_logger("store")
        self._lock = threading.RLock()
        self.messages = MessageRepository(db.conn)
        self.conversations = ConversationRepository(db.conn)
        self.action_items = ActionItemRepository(db.conn)

    # Messages

    def append_message(
        self,
        conversation_id: str,
        role: Union[str, MessageRole],
        content: str,
        name: Optional[str] = None,
        timestamp: TimeBound = None,
        activity_id: Optional[str] = None
    ) -> Optional[MessageDO]:
        """
        Append one message to a conversation.

        Args:
            conversation_id: Conversation key
            role: "user" or "assistant"
            content: Message text
            name: Sender display name
            timestamp: Message time (defaults to now)
            activity_id: Platform message identifier, needed for citations

        Returns:
            The stored MessageDO with its id, or None on storage failure

        Raises:
            ValueError: If role or timestamp are invalid
        """
        message = MessageDO(
            conversation_id=conversation_id,
            role=MessageRole(role).value,
            content=content,
            name=name or "Unknown",
            timestamp=parse_timestamp(timestamp) or utc_now(),
            activity_id=activity_id
        )
        with self._lock:
            if self.messages.add(message) is None:
                return None
        return message

    def append_messages(self, conversation_id: str, messages: Iterable[Dict[str, Any]]) -> int:
        """
        Append a batch of messages; exact-content repeats inside the batch are dropped.

        Returns:
            Number of messages stored
        """
        batch = [self._message_from_dict(conversation_id, m) for m in messages]
        with self._lock:
            return self.messages.add_batch(batch)

    def recent_messages(self, conversation_id: str, limit: int = 10) -> List[MessageDO]:
        """Get the last ``limit`` messages by insertion order, oldest first."""
        with self._lock:
            return self.messages.get_recent(conversation_id, limit)

    def messages_in_range(
        self,
        conversation_id: str,
        start: TimeBound = None,
        end: TimeBound = None
    ) -> List[MessageDO]:
        """
        Get messages with start <= timestamp <= end, ascending.

        Args:
            conversation_id: Conversation key
            start: Lower bound as datetime or ISO string, unbounded when None
            end: Upper bound as datetime or ISO string, unbounded when None

        Returns:
            Matching messages, or an empty list for unparseable bounds
        """
        try:
            start_time = parse_timestamp(start)
            end_time = parse_timestamp(end)
        except ValueError as e:
            self.logger.warning(f"Invalid time bounds for {conversation_id}: {e}")
            return []

        with self._lock:
            return self.messages.get_by_time_range(conversation_id, start_time, end_time)

    def save_snapshot(self, conversation_id: str, messages: List[Dict[str, Any]]) -> int:
        """
        Store the aggregate snapshot and append messages not yet recorded.

        A message counts as recorded when a stored message of the same
        conversation has exactly the same content.

        Returns:
            Number of newly appended messages
        """
        with self._lock:
            self.conversations.upsert(conversation_id, messages)
            existing = self.messages.get_contents(conversation_id)
            fresh = [
                self._message_from_dict(conversation_id, m)
                for m in messages
                if m.get("content") not in existing
            ]
            added = self.messages.add_batch(fresh)

        if added:
            self.logger.info(f"Snapshot for {conversation_id} added {added} new messages")
        return added

    def conversation_keys(self) -> List[str]:
        """Keys of stored snapshots, most recently updated first."""
        with self._lock:
            return self.conversations.keys()

    def get_snapshot(self, conversation_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            conversation = self.conversations.get(conversation_id)
        return conversation.messages if conversation else []

    def clear_conversation(self, conversation_id: str) -> None:
        """Delete all messages and the snapshot of a conversation."""
        with self._lock:
            deleted_messages = self.messages.delete_by_conversation(conversation_id)
            deleted_snapshots = self.conversations.delete(conversation_id)

        if deleted_messages == 0 and deleted_snapshots == 0:
            self.logger.info(f"Nothing to clear for conversation {conversation_id}")
        else:
            self.logger.info(
                f"Cleared conversation {conversation_id}: "
                f"{deleted_messages} messages, {deleted_snapshots} snapshot rows"
            )

    @staticmethod
    def _message_from_dict(conversation_id: str, data: Dict[str, Any]) -> MessageDO:
        return MessageDO(
            conversation_id=conversation_id,
            role=MessageRole(data.get("role", MessageRole.USER.value)).value,
            content=data["content"],
            name=data.get("name") or "Unknown",
            timestamp=parse_timestamp(data.get("timestamp")) or utc_now(),
            activity_id=data.get("activity_id")
        )

    # Action items

    def create_action_item(
        self,
        conversation_id: str,
        title: str,
        description: str,
        assigned_to: str,
        assigned_by: str,
        assigned_to_id: Optional[str] = None,
        assigned_by_id: Optional[str] = None,
        priority: Union[str, ActionItemPriority] = ActionItemPriority.MEDIUM,
        due_date: Optional[str] = None,
        source_message_ids: Optional[List[int]] = None
    ) -> Optional[ActionItemDO]:
        """
        Create a pending action item.

        Returns:
            The stored ActionItemDO, or None on storage failure

        Raises:
            ValueError: If priority is not one of low, medium, high, urgent
        """
        now = utc_now()
        item = ActionItemDO(
            conversation_id=conversation_id,
            title=title,
            description=description,
            assigned_to=assigned_to,
            assigned_to_id=assigned_to_id,
            assigned_by=assigned_by,
            assigned_by_id=assigned_by_id,
            status=ActionItemStatus.PENDING,
            priority=ActionItemPriority(priority),
            due_date=due_date,
            source_message_ids=list(source_message_ids or []),
            created_at=now,
            updated_at=now
        )
        with self._lock:
            if self.action_items.create(item) is None:
                return None
        return item

    def get_action_item(self, item_id: int) -> Optional[ActionItemDO]:
        with self._lock:
            return self.action_items.get(item_id)

    def action_items_by_conversation(self, conversation_id: str, status: Optional[str] = None) -> List[ActionItemDO]:
        with self._lock:
            return self.action_items.list_by_conversation(conversation_id, status)

    def action_items_by_assignee_name(self, name: str, status: Optional[str] = None) -> List[ActionItemDO]:
        with self._lock:
            return self.action_items.list_by_assignee_name(name, status)

    def action_items_by_assignee_id(self, user_id: str, status: Optional[str] = None) -> List[ActionItemDO]:
        with self._lock:
            return self.action_items.list_by_assignee_id(user_id, status)

    def all_action_items(self, status: Optional[str] = None) -> List[ActionItemDO]:
        with self._lock:
            return self.action_items.list_all(status)

    def update_action_item_status(self, item_id: int, status: Union[str, ActionItemStatus]) -> bool:
        """Apply a status transition; False when missing or not allowed."""
        with self._lock:
            return self.action_items.update_status(item_id, status)

    def clear_action_items(self, conversation_id: str) -> int:
        with self._lock:
            deleted = self.action_items.delete_by_conversation(conversation_id)
        self.logger.info(f"Cleared {deleted} action items from conversation {conversation_id}")
        return deleted

    # Debug surface

    def action_items_summary(self) -> Dict[str, Any]:
        with self._lock:
            return self.action_items.summary()

    def debug_dump(self, conversation_id: str) -> Dict[str, Any]:
        """
        Describe what is stored for a conversation.

        Returns:
            Dict with database_stats, conversation_table and messages_table
        """
        with self._lock:
            snapshot = self.conversations.get(conversation_id)
            messages = self.messages.get_by_time_range(conversation_id)
            stats = {
                "total_conversations": self.conversations.count(),
                "total_messages": self.messages.count_all(),
                "total_action_items": self.action_items.summary()["total"],
            }

        conversation_table: Dict[str, Any] = {"exists": snapshot is not None}
        if snapshot is not None:
            conversation_table["data"] = {
                "key": snapshot.key,
                "message_count": len(snapshot.messages),
                "created_at": snapshot.created_at.isoformat(),
                "updated_at": snapshot.updated_at.isoformat(),
            }

        return {
            "conversation_id": conversation_id,
            "timestamp": utc_now().isoformat(),
            "database_stats": stats,
            "conversation_table": conversation_table,
            "messages_table": {
                "count": len(messages),
                "messages": [
                    {
                        "id": m.id,
                        "role": m.role,
                        "name": m.name,
                        "timestamp": m.timestamp.isoformat(),
                        "activity_id": m.activity_id,
                        "content_preview": m.content[:100] + ("..." if len(m.content) > 100 else ""),
                        "content_length": len(m.content),
                    }
                    for m in messages
                ],
            },
        }
