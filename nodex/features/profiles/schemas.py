from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator


class Role(str, Enum):
    admin = "admin"
    student = "student"
    library = "library"
    hostel = "hostel"
    college_office = "college_office"
    faculty = "faculty"
    counsellor = "counsellor"
    class_advisor = "class_advisor"
    hod = "hod"
    lab_instructor = "lab_instructor"


class StudentType(str, Enum):
    local = "local"
    hostel = "hostel"


_HOSTEL_ALIASES = {"hostel", "hosteller", "hostler", "hostelite"}


def normalise_student_type(value) -> StudentType:
    """Coerce stored student types to local/hostel.

    Older rows carry admission categories such as "Regular" or "Lateral";
    only an explicit hostel marker makes the hostel stage applicable.
    """
    if isinstance(value, StudentType):
        return value
    text = str(value or "").strip().lower()
    return StudentType.hostel if text in _HOSTEL_ALIASES else StudentType.local


class StudentProfile(BaseModel):
    id: str
    name: Optional[str] = None
    usn: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = None
    section: Optional[str] = None
    batch: Optional[str] = None
    student_type: StudentType = StudentType.local
    profile_completed: bool = False

    @field_validator("student_type", mode="before")
    @classmethod
    def _coerce_student_type(cls, v):
        return normalise_student_type(v)

    @field_validator("profile_completed", mode="before")
    @classmethod
    def _none_is_false(cls, v):
        return bool(v)


class StaffProfile(BaseModel):
    id: str
    name: Optional[str] = None
    employee_id: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True


class RoleAssignment(BaseModel):
    user_id: str
    role: Role


class Subject(BaseModel):
    id: str
    code: Optional[str] = None
    name: Optional[str] = None
    semester: Optional[int] = None
    department: Optional[str] = None
    is_elective: Optional[bool] = None
    created_at: Optional[datetime] = None
