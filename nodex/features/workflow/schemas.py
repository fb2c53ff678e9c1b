from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from nodex.core.config import get_settings
from nodex.features.applications.schemas import ApplicationStatus
from nodex.features.profiles.schemas import Role, StudentType


class Decision(str, Enum):
    approve = "approve"
    reject = "reject"


class Stage(str, Enum):
    library = "library"
    hostel = "hostel"
    college_office = "college_office"
    faculty = "faculty"
    counsellor = "counsellor"
    class_advisor = "class_advisor"
    hod = "hod"
    payment = "payment"
    lab = "lab"

    @property
    def flag_column(self) -> str:
        return f"{self.value}_verified"

    @property
    def comment_column(self) -> str:
        return f"{self.value}_comment"


class Actor(BaseModel):
    """Identity of whoever performs a workflow operation."""
    user_id: str
    role: Role


# ===========================
# REQUEST SCHEMAS
# ===========================
class SubjectFacultyPair(BaseModel):
    subject_id: UUID
    faculty_id: UUID


class ApplicationSubmission(BaseModel):
    department: str = Field(..., examples=["CSE"])
    semester: int = Field(..., examples=[5])
    batch: str = Field(..., examples=["2023-27"])
    subjects: List[SubjectFacultyPair] = Field(..., min_length=1)

    @field_validator("department")
    @classmethod
    def _known_department(cls, v: str) -> str:
        value = v.strip().upper()
        allowed = get_settings().departments
        if value not in allowed:
            raise ValueError(f"Invalid department. Must be one of: {', '.join(allowed)}")
        return value

    @field_validator("semester")
    @classmethod
    def _semester_range(cls, v: int) -> int:
        s = get_settings()
        if v < s.min_semester or v > s.max_semester:
            raise ValueError(f"Invalid semester. Must be between {s.min_semester} and {s.max_semester}")
        return v

    @field_validator("batch")
    @classmethod
    def _batch_format(cls, v: str) -> str:
        value = v.strip()
        if not re.match(get_settings().batch_pattern, value):
            raise ValueError("Invalid batch format. Must be in format YYYY-YY (e.g., 2023-27)")
        return value

    @model_validator(mode="after")
    def _unique_subjects(self):
        ids = [str(p.subject_id) for p in self.subjects]
        if len(ids) != len(set(ids)):
            raise ValueError("Each subject may appear only once")
        return self


class VerificationRequest(BaseModel):
    decision: Decision
    comment: Optional[str] = None


class PaymentSubmission(BaseModel):
    transaction_id: str
    submitter_name: str


class BulkDeleteRequest(BaseModel):
    batch: str
    department: str


# ===========================
# RESPONSE SCHEMAS
# ===========================
class StageView(BaseModel):
    stage: Stage
    label: str
    verified: Optional[bool] = None
    comment: Optional[str] = None


class ApplicationProgress(BaseModel):
    application_id: str
    student_type: StudentType
    status: ApplicationStatus
    progress_percent: int
    verified_stages: int
    applicable_stages: int
    stages: List[StageView]


class VerificationOutcome(BaseModel):
    application_id: str
    role: Role
    decision: Decision
    status: ApplicationStatus
    progress_percent: int
    changed: bool
    stage_complete: bool = True


class PaymentOutcome(BaseModel):
    application_id: str
    transaction_id: str
    status: ApplicationStatus
    notified_lab_instructors: int = 0


class SubmissionOutcome(BaseModel):
    application_id: str
    assignments_created: int
    message: str = "Application submitted successfully"


class DeletionSummary(BaseModel):
    deleted_applications: int = 0
    deleted_faculty_assignments: int = 0
    deleted_notifications: int = 0


class TrackerRow(BaseModel):
    application_id: str
    student_id: str
    semester: int
    status: ApplicationStatus
    progress_percent: int
    created_at: Optional[datetime] = None


class TrackerSummary(BaseModel):
    batch: str
    department: str
    total: int
    in_progress: int
    completed: int
    rejected: int
    applications: List[TrackerRow]


class ClearanceItem(BaseModel):
    label: str
    verified_on: Optional[datetime] = None
    comment: Optional[str] = None


class CertificateData(BaseModel):
    application_id: str
    student_name: Optional[str] = None
    usn: Optional[str] = None
    department: str
    semester: int
    batch: str
    section: Optional[str] = None
    student_type: StudentType
    transaction_id: Optional[str] = None
    issued_on: Optional[datetime] = None
    clearances: List[ClearanceItem]
