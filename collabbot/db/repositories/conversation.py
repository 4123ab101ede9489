"""Conversation snapshot repository for database operations."""

import json
from typing import Any, Dict, List, Optional
from .base import BaseRepository
from ..database_models.conversation import ConversationDO
from ...utils.time_range import utc_now


class ConversationRepository(BaseRepository):
    """Repository for the aggregate conversation snapshots."""

    def upsert(self, key: str, messages: List[Dict[str, Any]]) -> bool:
        """
        Create or replace the snapshot stored under a conversation key.

        Args:
            key: Conversation key
            messages: JSON-serialisable message list

        Returns:
            True if successful, False otherwise
        """
        now = utc_now()
        try:
            self.conn.execute("""
                INSERT INTO conversations (key, value, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, [key, json.dumps(messages, default=str), now, now])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to save conversation snapshot {key}: {e}")
            return False

    def get(self, key: str) -> Optional[ConversationDO]:
        """
        Get a conversation snapshot.

        Args:
            key: Conversation key

        Returns:
            ConversationDO if found, None otherwise
        """
        try:
            row = self.conn.execute("""
                SELECT key, value, created_at, updated_at
                FROM conversations
                WHERE key = ?
            """, [key]).fetchone()

            if not row:
                return None

            return ConversationDO(
                key=row[0],
                messages=json.loads(row[1]) if isinstance(row[1], str) else (row[1] or []),
                created_at=row[2],
                updated_at=row[3]
            )
        except Exception as e:
            self.logger.error(f"Failed to get conversation snapshot {key}: {e}")
            return None

    def keys(self) -> List[str]:
        """List conversation keys, most recently updated first."""
        try:
            results = self.conn.execute("""
                SELECT key FROM conversations ORDER BY updated_at DESC
            """).fetchall()
            return [row[0] for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list conversations: {e}")
            return []

    def count(self) -> int:
        try:
            result = self.conn.execute("SELECT COUNT(*) FROM conversations").fetchone()
            return result[0] if result else 0
        except Exception as e:
            self.logger.error(f"Failed to count conversations: {e}")
            return 0

    def delete(self, key: str) -> int:
        """
        Delete a conversation snapshot.

        Args:
            key: Conversation key

        Returns:
            Number of deleted rows (0 or 1)
        """
        try:
            deleted = self.conn.execute("""
                DELETE FROM conversations WHERE key = ? RETURNING key
            """, [key]).fetchall()
            self.conn.commit()
            return len(deleted)
        except Exception as e:
            self.logger.error(f"Failed to delete conversation snapshot {key}: {e}")
            return 0
