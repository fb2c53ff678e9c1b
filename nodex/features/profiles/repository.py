from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from nodex.db.store import EntityStore
from .schemas import Role, RoleAssignment, StaffProfile, StudentProfile, Subject

logger = logging.getLogger("profiles.repository")

STUDENTS_TABLE = "profiles"
STAFF_TABLE = "staff_profiles"
ROLES_TABLE = "user_roles"
SUBJECTS_TABLE = "subjects"


class ProfileRepository:
    """Read access to students, staff, role assignments and subjects."""

    def __init__(self, store: Optional[EntityStore] = None):
        self.store = store or EntityStore()

    async def get_student(self, student_id: str) -> Optional[StudentProfile]:
        rows = await self.store.read(STUDENTS_TABLE, {"id": student_id}, limit=1)
        return StudentProfile(**rows[0]) if rows else None

    async def get_students(self, student_ids: Sequence[str]) -> List[StudentProfile]:
        rows = await self.store.read(STUDENTS_TABLE, {"id": list(student_ids)})
        return [StudentProfile(**r) for r in rows]

    async def get_staff(self, staff_id: str) -> Optional[StaffProfile]:
        rows = await self.store.read(STAFF_TABLE, {"id": staff_id}, limit=1)
        return StaffProfile(**rows[0]) if rows else None

    async def get_active_staff(self, staff_ids: Sequence[str]) -> List[StaffProfile]:
        rows = await self.store.read(STAFF_TABLE, {"id": list(staff_ids), "is_active": True})
        return [StaffProfile(**r) for r in rows]

    async def get_subjects(self, subject_ids: Sequence[str]) -> List[Subject]:
        rows = await self.store.read(SUBJECTS_TABLE, {"id": list(subject_ids)})
        return [Subject(**r) for r in rows]

    async def get_roles(self, user_id: str) -> List[Role]:
        rows = await self.store.read(ROLES_TABLE, {"user_id": user_id}, columns="user_id, role")
        roles: List[Role] = []
        for row in rows:
            try:
                roles.append(RoleAssignment(**row).role)
            except ValueError:
                logger.warning("Ignoring unknown role %r for user %s", row.get("role"), user_id)
        return roles

    async def has_role(self, user_id: str, role: Role) -> bool:
        rows = await self.store.read(
            ROLES_TABLE, {"user_id": user_id, "role": role.value}, columns="user_id", limit=1
        )
        return bool(rows)

    async def user_ids_with_role(self, role: Role, department: Optional[str] = None) -> List[str]:
        """Active staff holding ``role``, optionally narrowed to one department."""
        rows = await self.store.read(ROLES_TABLE, {"role": role.value}, columns="user_id")
        user_ids = [str(r["user_id"]) for r in rows if r.get("user_id")]
        if not user_ids:
            return []
        filters = {"id": user_ids, "is_active": True}
        if department:
            filters["department"] = department
        staff = await self.store.read(STAFF_TABLE, filters, columns="id")
        active = {str(s["id"]) for s in staff}
        return [uid for uid in user_ids if uid in active]
