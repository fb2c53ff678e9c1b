from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from nodex.features.profiles.schemas import StudentType, normalise_student_type


class ApplicationStatus(str, Enum):
    pending = "pending"
    faculty_stage = "faculty_stage"
    hod_stage = "hod_stage"
    hod_verified = "hod_verified"
    payment_pending = "payment_pending"
    clearance_pending = "clearance_pending"
    completed = "completed"
    rejected = "rejected"


class Application(BaseModel):
    """A no-due application row.

    ``student_type`` is not an application column: it is copied from the
    owning student's profile when the record is loaded so the hostel stage can
    be resolved without a second lookup.
    """

    id: str
    student_id: str
    department: str
    semester: int
    batch: str
    status: ApplicationStatus = ApplicationStatus.pending

    library_verified: Optional[bool] = None
    library_comment: Optional[str] = None
    hostel_verified: Optional[bool] = None
    hostel_comment: Optional[str] = None
    college_office_verified: Optional[bool] = None
    college_office_comment: Optional[str] = None
    faculty_verified: Optional[bool] = None
    faculty_comment: Optional[str] = None
    counsellor_verified: Optional[bool] = None
    counsellor_comment: Optional[str] = None
    class_advisor_verified: Optional[bool] = None
    class_advisor_comment: Optional[str] = None
    hod_verified: Optional[bool] = None
    hod_comment: Optional[str] = None
    payment_verified: Optional[bool] = None
    payment_comment: Optional[str] = None
    lab_verified: Optional[bool] = None
    lab_comment: Optional[str] = None

    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    student_type: StudentType = StudentType.local

    @field_validator("status", mode="before")
    @classmethod
    def _legacy_status(cls, v):
        # Rows written by older dashboards used per-stage labels such as
        # "faculty_verified"; the workflow recomputes status from the flags.
        try:
            return ApplicationStatus(v)
        except ValueError:
            return ApplicationStatus.pending

    @field_validator("student_type", mode="before")
    @classmethod
    def _coerce_student_type(cls, v):
        return normalise_student_type(v)


class SubjectFacultyAssignment(BaseModel):
    id: Optional[str] = None
    application_id: str
    subject_id: str
    faculty_id: str
    faculty_verified: Optional[bool] = False
    faculty_comment: Optional[str] = None
