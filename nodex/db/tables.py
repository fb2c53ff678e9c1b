"""SQLAlchemy table metadata for the workflow schema.

Runtime access goes through the Supabase REST API; these definitions exist so
Alembic can autogenerate and compare migrations against the live database.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

metadata = sa.MetaData()

UUID = postgresql.UUID(as_uuid=False)
_NOW = sa.text("now()")
_GEN_UUID = sa.text("gen_random_uuid()")

STAGE_COLUMNS = (
    "library",
    "hostel",
    "college_office",
    "faculty",
    "counsellor",
    "class_advisor",
    "hod",
    "payment",
    "lab",
)


def _stage_columns():
    cols = []
    for stage in STAGE_COLUMNS:
        cols.append(sa.Column(f"{stage}_verified", sa.Boolean(), nullable=True))
        cols.append(sa.Column(f"{stage}_comment", sa.Text(), nullable=True))
    return cols


profiles = sa.Table(
    "profiles",
    metadata,
    sa.Column("id", UUID, primary_key=True),
    sa.Column("name", sa.Text()),
    sa.Column("usn", sa.String(32), unique=True),
    sa.Column("email", sa.Text()),
    sa.Column("phone", sa.String(32)),
    sa.Column("department", sa.String(16)),
    sa.Column("semester", sa.Integer()),
    sa.Column("section", sa.String(8)),
    sa.Column("batch", sa.String(16)),
    sa.Column("student_type", sa.String(16), nullable=False, server_default="local"),
    sa.Column("profile_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
)

staff_profiles = sa.Table(
    "staff_profiles",
    metadata,
    sa.Column("id", UUID, primary_key=True),
    sa.Column("name", sa.Text()),
    sa.Column("employee_id", sa.String(32), unique=True),
    sa.Column("designation", sa.Text()),
    sa.Column("department", sa.String(16)),
    sa.Column("email", sa.Text()),
    sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
)

user_roles = sa.Table(
    "user_roles",
    metadata,
    sa.Column("id", UUID, primary_key=True, server_default=_GEN_UUID),
    sa.Column("user_id", UUID, nullable=False, index=True),
    sa.Column("role", sa.String(32), nullable=False),
    sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
)

subjects = sa.Table(
    "subjects",
    metadata,
    sa.Column("id", UUID, primary_key=True, server_default=_GEN_UUID),
    sa.Column("code", sa.String(32), nullable=False),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("semester", sa.Integer()),
    sa.Column("department", sa.String(16)),
    sa.Column("is_elective", sa.Boolean(), server_default=sa.false()),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
)

applications = sa.Table(
    "applications",
    metadata,
    sa.Column("id", UUID, primary_key=True, server_default=_GEN_UUID),
    sa.Column("student_id", UUID, sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    sa.Column("department", sa.String(16), nullable=False),
    sa.Column("semester", sa.Integer(), nullable=False),
    sa.Column("batch", sa.String(16), nullable=False),
    sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
    *_stage_columns(),
    sa.Column("transaction_id", sa.String(100)),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
    sa.UniqueConstraint("student_id", "semester", "batch", name="uq_applications_student_semester_batch"),
    sa.CheckConstraint("semester BETWEEN 1 AND 8", name="ck_applications_semester"),
)

application_subject_faculty = sa.Table(
    "application_subject_faculty",
    metadata,
    sa.Column("id", UUID, primary_key=True, server_default=_GEN_UUID),
    sa.Column(
        "application_id", UUID, sa.ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    ),
    sa.Column("subject_id", UUID, sa.ForeignKey("subjects.id"), nullable=False),
    sa.Column("faculty_id", UUID, sa.ForeignKey("staff_profiles.id"), nullable=False, index=True),
    sa.Column("faculty_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
    sa.Column("faculty_comment", sa.Text()),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
    sa.UniqueConstraint("application_id", "subject_id", name="uq_asf_application_subject"),
)

notifications = sa.Table(
    "notifications",
    metadata,
    sa.Column("id", UUID, primary_key=True, server_default=_GEN_UUID),
    sa.Column("user_id", UUID, nullable=False, index=True),
    sa.Column("title", sa.Text(), nullable=False),
    sa.Column("message", sa.Text(), nullable=False),
    sa.Column("type", sa.String(16), nullable=False, server_default="info"),
    sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
    sa.Column("read_at", sa.DateTime(timezone=True)),
    sa.Column("related_entity_type", sa.String(32)),
    sa.Column("related_entity_id", UUID),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
)

audit_logs = sa.Table(
    "audit_logs",
    metadata,
    sa.Column("id", UUID, primary_key=True, server_default=_GEN_UUID),
    sa.Column("user_id", UUID),
    sa.Column("action", sa.String(64), nullable=False),
    sa.Column("table_name", sa.String(64), nullable=False),
    sa.Column("record_id", UUID),
    sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb")),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
)
