"""Message repository for database operations."""

from datetime import datetime
from typing import Optional, List, Set
from .base import BaseRepository
from ..database_models.message import MessageDO


_COLUMNS = "id, conversation_id, role, name, content, timestamp, activity_id"


class MessageRepository(BaseRepository):
    """Repository for Message CRUD operations."""

    @staticmethod
    def _to_do(row) -> MessageDO:
        return MessageDO(
            id=row[0],
            conversation_id=row[1],
            role=row[2],
            name=row[3] or "Unknown",
            content=row[4],
            timestamp=row[5],
            activity_id=row[6]
        )

    def add(self, message: MessageDO) -> Optional[int]:
        """
        Add a new message.

        Args:
            message: MessageDO instance

        Returns:
            Message ID if successful, None otherwise
        """
        try:
            result = self.conn.execute(f"""
                INSERT INTO messages ({_COLUMNS})
                VALUES (nextval('messages_id_seq'), ?, ?, ?, ?, ?, ?)
                RETURNING id
            """, [
                message.conversation_id,
                message.role,
                message.name,
                message.content,
                message.timestamp,
                message.activity_id
            ]).fetchone()

            message_id = result[0] if result else None
            if message_id:
                self.conn.commit()
                message.id = message_id
                self.logger.debug(f"Added message {message_id} to conversation {message.conversation_id}")
            return message_id
        except Exception as e:
            self.logger.error(f"Failed to add message: {e}")
            return None

    def add_batch(self, messages: List[MessageDO]) -> int:
        """
        Add multiple messages, dropping exact-content repeats within the batch.

        Args:
            messages: List of MessageDO instances

        Returns:
            Number of messages successfully added
        """
        seen: Set[tuple] = set()
        added_count = 0
        for message in messages:
            key = (message.conversation_id, message.content)
            if key in seen:
                self.logger.debug(f"Skipped duplicate content in batch for {message.conversation_id}")
                continue
            seen.add(key)
            if self.add(message) is not None:
                added_count += 1

        if added_count > 0:
            self.logger.debug(f"Added {added_count} messages in batch")

        return added_count

    def get_recent(self, conversation_id: str, limit: int = 10) -> List[MessageDO]:
        """
        Get the most recently inserted messages for a conversation.

        Args:
            conversation_id: Conversation ID
            limit: Maximum number of messages to return

        Returns:
            List of MessageDO instances (oldest first)
        """
        if limit <= 0:
            return []
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM messages
                WHERE conversation_id = ?
                ORDER BY id DESC
                LIMIT ?
            """, [conversation_id, limit]).fetchall()

            messages = [self._to_do(row) for row in results]

            # Reverse to get chronological order
            messages.reverse()
            return messages
        except Exception as e:
            self.logger.error(f"Failed to get recent messages: {e}")
            return []

    def get_by_time_range(
        self,
        conversation_id: str,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None
    ) -> List[MessageDO]:
        """
        Get messages whose timestamp falls within inclusive bounds.

        Args:
            conversation_id: Conversation ID
            start_time: Lower bound (naive UTC), unbounded when None
            end_time: Upper bound (naive UTC), unbounded when None

        Returns:
            List of MessageDO instances in ascending timestamp order
        """
        if start_time is not None and end_time is not None and start_time > end_time:
            return []

        query = f"SELECT {_COLUMNS} FROM messages WHERE conversation_id = ?"
        params = [conversation_id]
        if start_time is not None:
            query += " AND timestamp >= ?"
            params.append(start_time)
        if end_time is not None:
            query += " AND timestamp <= ?"
            params.append(end_time)
        query += " ORDER BY timestamp ASC, id ASC"

        try:
            results = self.conn.execute(query, params).fetchall()
            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to get messages by time range: {e}")
            return []

    def get_contents(self, conversation_id: str) -> Set[str]:
        """Get the set of message contents stored for a conversation."""
        try:
            results = self.conn.execute("""
                SELECT DISTINCT content FROM messages WHERE conversation_id = ?
            """, [conversation_id]).fetchall()
            return {row[0] for row in results}
        except Exception as e:
            self.logger.error(f"Failed to get message contents: {e}")
            return set()

    def count(self, conversation_id: str) -> int:
        """Count messages in a conversation."""
        try:
            result = self.conn.execute("""
                SELECT COUNT(*) FROM messages WHERE conversation_id = ?
            """, [conversation_id]).fetchone()
            return result[0] if result else 0
        except Exception as e:
            self.logger.error(f"Failed to count messages: {e}")
            return 0

    def count_all(self) -> int:
        """Count messages across all conversations."""
        try:
            result = self.conn.execute("SELECT COUNT(*) FROM messages").fetchone()
            return result[0] if result else 0
        except Exception as e:
            self.logger.error(f"Failed to count messages: {e}")
            return 0

    def delete_by_conversation(self, conversation_id: str) -> int:
        """
        Delete all messages for a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            Number of deleted messages
        """
        try:
            deleted = self.conn.execute("""
                DELETE FROM messages WHERE conversation_id = ? RETURNING id
            """, [conversation_id]).fetchall()
            self.conn.commit()
            return len(deleted)
        except Exception as e:
            self.logger.error(f"Failed to delete messages for conversation {conversation_id}: {e}")
            return 0
