from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from nodex.db.store import EntityStore
from .schemas import AuditLogEntry

logger = logging.getLogger("audit.repository")

AUDIT_TABLE = "audit_logs"


class AuditLog:
    """Append-only audit trail. Never read back by the workflow."""

    def __init__(self, store: Optional[EntityStore] = None):
        self.store = store or EntityStore()

    async def record(
        self,
        action: str,
        table: str,
        record_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        actor_id: Optional[str] = None,
    ) -> bool:
        entry = AuditLogEntry(
            action=action,
            table_name=table,
            record_id=record_id,
            user_id=actor_id,
            metadata=metadata or {},
        )
        try:
            await self.store.insert(AUDIT_TABLE, entry.model_dump(mode="json", exclude_none=True))
            return True
        except Exception as e:  # noqa: BLE001
            logger.error("audit.record failed action=%s record=%s: %s", action, record_id, e)
            return False
