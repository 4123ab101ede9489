"""Action item repository for database operations."""

import json
from typing import Dict, List, Optional, Union
from .base import BaseRepository
from ..database_models.action_item import ActionItemDO, ActionItemStatus, ActionItemPriority
from ...utils.time_range import utc_now


_COLUMNS = (
    "id, conversation_id, title, description, assigned_to, assigned_to_id, "
    "assigned_by, assigned_by_id, status, priority, due_date, created_at, "
    "updated_at, source_message_ids"
)


class ActionItemRepository(BaseRepository):
    """Repository for ActionItem CRUD operations."""

    @staticmethod
    def _to_do(row) -> ActionItemDO:
        source_ids = row[13]
        if isinstance(source_ids, str):
            source_ids = json.loads(source_ids)
        return ActionItemDO(
            id=row[0],
            conversation_id=row[1],
            title=row[2],
            description=row[3],
            assigned_to=row[4],
            assigned_to_id=row[5],
            assigned_by=row[6],
            assigned_by_id=row[7],
            status=ActionItemStatus(row[8]),
            priority=ActionItemPriority(row[9]),
            due_date=row[10],
            created_at=row[11],
            updated_at=row[12],
            source_message_ids=source_ids or []
        )

    def create(self, item: ActionItemDO) -> Optional[int]:
        """
        Create a new action item.

        Args:
            item: ActionItemDO instance

        Returns:
            Action item ID if successful, None otherwise

        Raises:
            ValueError: If status or priority is not a known value
        """
        status = ActionItemStatus(item.status)
        priority = ActionItemPriority(item.priority)

        try:
            result = self.conn.execute(f"""
                INSERT INTO action_items ({_COLUMNS})
                VALUES (nextval('action_items_id_seq'), ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                RETURNING id
            """, [
                item.conversation_id,
                item.title,
                item.description,
                item.assigned_to,
                item.assigned_to_id,
                item.assigned_by,
                item.assigned_by_id,
                status.value,
                priority.value,
                item.due_date,
                item.created_at,
                item.updated_at,
                json.dumps(list(item.source_message_ids))
            ]).fetchone()

            item_id = result[0] if result else None
            if item_id:
                self.conn.commit()
                item.id = item_id
                item.status = status
                item.priority = priority
                self.logger.debug(f"Created action item {item_id} in conversation {item.conversation_id}")
            return item_id
        except Exception as e:
            self.logger.error(f"Failed to create action item: {e}")
            return None

    def get(self, item_id: int) -> Optional[ActionItemDO]:
        """
        Get an action item by ID.

        Args:
            item_id: Action item ID

        Returns:
            ActionItemDO if found, None otherwise
        """
        try:
            row = self.conn.execute(f"""
                SELECT {_COLUMNS} FROM action_items WHERE id = ?
            """, [item_id]).fetchone()
            return self._to_do(row) if row else None
        except Exception as e:
            self.logger.error(f"Failed to get action item {item_id}: {e}")
            return None

    def _list(self, where: str, params: list, status: Optional[str] = None) -> List[ActionItemDO]:
        query = f"SELECT {_COLUMNS} FROM action_items"
        clauses = [where] if where else []
        params = list(params)
        if status:
            clauses.append("status = ?")
            params.append(status)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY created_at DESC, id DESC"

        try:
            results = self.conn.execute(query, params).fetchall()
            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list action items: {e}")
            return []

    def list_by_conversation(self, conversation_id: str, status: Optional[str] = None) -> List[ActionItemDO]:
        """List action items of a conversation, newest first."""
        return self._list("conversation_id = ?", [conversation_id], status)

    def list_by_assignee_name(self, name: str, status: Optional[str] = None) -> List[ActionItemDO]:
        """List action items assigned to a display name (case-insensitive)."""
        return self._list("LOWER(assigned_to) = LOWER(?)", [name], status)

    def list_by_assignee_id(self, user_id: str, status: Optional[str] = None) -> List[ActionItemDO]:
        """List action items assigned to a user ID across all conversations."""
        return self._list("assigned_to_id = ?", [user_id], status)

    def list_all(self, status: Optional[str] = None) -> List[ActionItemDO]:
        return self._list("", [], status)

    def update_status(self, item_id: int, status: Union[str, ActionItemStatus]) -> bool:
        """
        Move an action item to a new status.

        Args:
            item_id: Action item ID
            status: Target status

        Returns:
            True if the item now has the target status, False if the item is
            missing, the transition is not allowed or the update failed
        """
        try:
            target = ActionItemStatus(status)
        except ValueError:
            self.logger.warning(f"Rejected unknown action item status: {status}")
            return False

        try:
            row = self.conn.execute("""
                SELECT status FROM action_items WHERE id = ?
            """, [item_id]).fetchone()
            if not row:
                self.logger.warning(f"Action item {item_id} not found")
                return False

            current = ActionItemStatus(row[0])
            if current == target:
                return True
            if not current.can_transition(target):
                self.logger.warning(
                    f"Rejected action item {item_id} transition {current.value} -> {target.value}"
                )
                return False

            updated = self.conn.execute("""
                UPDATE action_items
                SET status = ?, updated_at = ?
                WHERE id = ? AND status = ?
                RETURNING id
            """, [target.value, utc_now(), item_id, current.value]).fetchall()
            self.conn.commit()
            if not updated:
                return False

            self.logger.info(f"Action item {item_id} moved {current.value} -> {target.value}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to update action item {item_id}: {e}")
            return False

    def delete_by_conversation(self, conversation_id: str) -> int:
        """
        Delete all action items of a conversation.

        Returns:
            Number of deleted action items
        """
        try:
            deleted = self.conn.execute("""
                DELETE FROM action_items WHERE conversation_id = ? RETURNING id
            """, [conversation_id]).fetchall()
            self.conn.commit()
            return len(deleted)
        except Exception as e:
            self.logger.error(f"Failed to delete action items for conversation {conversation_id}: {e}")
            return 0

    def summary(self) -> Dict[str, object]:
        """
        Count action items by status and priority.

        Returns:
            Dict with total, by_status and by_priority counts
        """
        by_status = {s.value: 0 for s in ActionItemStatus}
        by_priority = {p.value: 0 for p in ActionItemPriority}
        total = 0
        try:
            results = self.conn.execute("""
                SELECT status, priority, COUNT(*)
                FROM action_items
                GROUP BY status, priority
            """).fetchall()
            for status, priority, count in results:
                by_status[status] = by_status.get(status, 0) + count
                by_priority[priority] = by_priority.get(priority, 0) + count
                total += count
        except Exception as e:
            self.logger.error(f"Failed to summarize action items: {e}")

        return {"total": total, "by_status": by_status, "by_priority": by_priority}
