from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from nodex.common.utils import format_timestamp
from nodex.db.store import EntityStore
from nodex.features.profiles.schemas import StudentType
from .schemas import Application, SubjectFacultyAssignment

logger = logging.getLogger("applications.repository")

APPLICATIONS_TABLE = "applications"
ASSIGNMENTS_TABLE = "application_subject_faculty"
NOTIFICATIONS_TABLE = "notifications"


def _to_application(row: Dict[str, Any], student_type: Optional[StudentType] = None) -> Application:
    data = dict(row)
    if student_type is not None:
        data["student_type"] = student_type
    return Application(**data)


class ApplicationRepository:
    def __init__(self, store: Optional[EntityStore] = None):
        self.store = store or EntityStore()

    async def get(self, application_id: str, student_type: Optional[StudentType] = None) -> Optional[Application]:
        rows = await self.store.read(APPLICATIONS_TABLE, {"id": application_id}, limit=1)
        return _to_application(rows[0], student_type) if rows else None

    async def find_existing(self, student_id: str, semester: int, batch: str) -> Optional[Dict[str, Any]]:
        rows = await self.store.read(
            APPLICATIONS_TABLE,
            {"student_id": student_id, "semester": semester, "batch": batch},
            columns="id",
            limit=1,
        )
        return rows[0] if rows else None

    async def list_by_department(
        self, department: str, batch: Optional[str] = None, semester: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        filters: Dict[str, Any] = {"department": department}
        if batch:
            filters["batch"] = batch
        if semester is not None:
            filters["semester"] = semester
        return await self.store.read(APPLICATIONS_TABLE, filters, order_by="created_at", desc=True)

    async def list_by_ids(self, application_ids: Sequence[str]) -> List[Dict[str, Any]]:
        return await self.store.read(
            APPLICATIONS_TABLE, {"id": list(application_ids)}, order_by="created_at", desc=True
        )

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self.store.read(APPLICATIONS_TABLE, order_by="created_at", desc=True)

    async def list_ids(self, batch: str, department: str) -> List[str]:
        rows = await self.store.read(
            APPLICATIONS_TABLE, {"batch": batch, "department": department}, columns="id"
        )
        return [str(r["id"]) for r in rows]

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self.store.insert(APPLICATIONS_TABLE, record)
        if not rows:
            raise RuntimeError("Failed to create application record")
        return rows[0]

    async def update_if_unchanged(
        self, application_id: str, expected_updated_at: Optional[datetime], patch: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Optimistic write: only applies when ``updated_at`` still matches."""
        filters: Dict[str, Any] = {"id": application_id}
        filters["updated_at"] = format_timestamp(expected_updated_at) if expected_updated_at else None
        return await self.store.update(APPLICATIONS_TABLE, filters, patch)

    async def delete_many(self, application_ids: Sequence[str]) -> int:
        return await self.store.delete(APPLICATIONS_TABLE, {"id": list(application_ids)})

    # ---- subject / faculty assignments ---------------------------------------
    async def create_assignments(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await self.store.insert(ASSIGNMENTS_TABLE, rows)

    async def get_assignments(self, application_id: str) -> List[SubjectFacultyAssignment]:
        rows = await self.store.read(ASSIGNMENTS_TABLE, {"application_id": application_id})
        return [SubjectFacultyAssignment(**r) for r in rows]

    async def assignments_for_faculty(self, faculty_id: str) -> List[SubjectFacultyAssignment]:
        rows = await self.store.read(ASSIGNMENTS_TABLE, {"faculty_id": faculty_id})
        return [SubjectFacultyAssignment(**r) for r in rows]

    async def set_assignments_verified(
        self, application_id: str, faculty_id: str, verified: bool, comment: Optional[str]
    ) -> List[Dict[str, Any]]:
        return await self.store.update(
            ASSIGNMENTS_TABLE,
            {"application_id": application_id, "faculty_id": faculty_id},
            {"faculty_verified": verified, "faculty_comment": comment},
        )

    async def delete_assignments(self, application_ids: Sequence[str]) -> int:
        return await self.store.delete(ASSIGNMENTS_TABLE, {"application_id": list(application_ids)})

    async def delete_related_notifications(self, application_ids: Sequence[str]) -> int:
        return await self.store.delete(
            NOTIFICATIONS_TABLE,
            {"related_entity_type": "application", "related_entity_id": list(application_ids)},
        )
