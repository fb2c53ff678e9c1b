from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from nodex.db.store import EntityStore
from .repository import NotificationRepository
from .schemas import Notification, NotificationCreate, NotificationInbox, NotificationType

logger = logging.getLogger("notifications.service")


class NotificationService:
    """Persists notifications; live push is handled by the realtime channel on insert."""

    def __init__(self, repository: Optional[NotificationRepository] = None, store: Optional[EntityStore] = None):
        self.repository = repository or NotificationRepository(store)

    async def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type_: NotificationType = NotificationType.info,
        related_entity_type: Optional[str] = None,
        related_entity_id: Optional[str] = None,
    ) -> Notification:
        payload = NotificationCreate(
            user_id=user_id,
            title=title,
            message=message,
            type=type_,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
        )
        rows = await self.repository.insert([payload.model_dump(mode="json")])
        if not rows:
            raise RuntimeError("Failed to create notification")
        return Notification(**rows[0])

    async def notify_bulk(self, items: Iterable[NotificationCreate]) -> List[Notification]:
        payload = [item.model_dump(mode="json") for item in items]
        if not payload:
            return []
        rows = await self.repository.insert(payload)
        return [Notification(**r) for r in rows]

    async def list_for_user(self, user_id: str, only_unread: bool = False, limit: int = 100) -> NotificationInbox:
        rows = await self.repository.list_for_user(user_id, only_unread=only_unread, limit=limit)
        notifications = [Notification(**r) for r in rows]
        if only_unread:
            unread = len(notifications)
        else:
            unread = sum(1 for n in notifications if not n.read)
        return NotificationInbox(notifications=notifications, unread_count=unread)

    async def unread_count(self, user_id: str) -> int:
        rows = await self.repository.list_for_user(user_id, only_unread=True, limit=1000)
        return len(rows)

    async def mark_read(self, notification_id: str, user_id: str) -> bool:
        return await self.repository.mark_read(notification_id, user_id)

    async def mark_all_read(self, user_id: str) -> int:
        updated = await self.repository.mark_all_read(user_id)
        logger.info("Marked %d notifications read for user %s", updated, user_id)
        return updated

    async def delete_notification(self, notification_id: str, user_id: str) -> bool:
        return await self.repository.delete(notification_id, user_id)
