from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from nodex.common.utils import current_timestamp, format_timestamp
from nodex.db.store import EntityStore

logger = logging.getLogger("notifications.repository")

NOTIFICATIONS_TABLE = "notifications"


class NotificationRepository:
    def __init__(self, store: Optional[EntityStore] = None):
        self.store = store or EntityStore()

    async def insert(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await self.store.insert(NOTIFICATIONS_TABLE, rows)

    async def list_for_user(self, user_id: str, only_unread: bool = False, limit: int = 100) -> List[Dict[str, Any]]:
        filters: Dict[str, Any] = {"user_id": user_id}
        if only_unread:
            filters["read"] = False
        return await self.store.read(
            NOTIFICATIONS_TABLE, filters, order_by="created_at", desc=True, limit=limit
        )

    async def mark_read(self, notification_id: str, user_id: str) -> bool:
        rows = await self.store.update(
            NOTIFICATIONS_TABLE,
            {"id": notification_id, "user_id": user_id},
            {"read": True, "read_at": format_timestamp(current_timestamp())},
        )
        return bool(rows)

    async def mark_all_read(self, user_id: str) -> int:
        rows = await self.store.update(
            NOTIFICATIONS_TABLE,
            {"user_id": user_id, "read": False},
            {"read": True, "read_at": format_timestamp(current_timestamp())},
        )
        return len(rows)

    async def delete(self, notification_id: str, user_id: str) -> bool:
        return await self.store.delete(NOTIFICATIONS_TABLE, {"id": notification_id, "user_id": user_id}) > 0
