from __future__ import annotations

"""
Verification rules for the no-due clearance pipeline.

Pure decision logic: nothing here touches storage. Given an application's
current flags and the acting role, ``evaluate`` decides whether the action is
allowed, which columns change, and what the resulting status and progress are.

Stage ordering:
    library, hostel (hostel students only), college_office   no prerequisites
    faculty, counsellor, class_advisor                        college_office
    hod                                                       faculty, counsellor, class_advisor
    payment + lab (fused, lab_instructor)                     hod and a transaction id
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from nodex.common.errors import (
    ApplicationClosedError,
    InvalidRoleError,
    PrecondOrderingError,
    ValidationError,
)
from nodex.features.applications.schemas import Application, ApplicationStatus
from nodex.features.profiles.schemas import Role, StudentType
from nodex.features.workflow.schemas import (
    ApplicationProgress,
    Decision,
    Stage,
    StageView,
)

STAGE_LABELS: Dict[Stage, str] = {
    Stage.library: "Library",
    Stage.hostel: "Hostel",
    Stage.college_office: "College Office",
    Stage.faculty: "Faculty",
    Stage.counsellor: "Counsellor",
    Stage.class_advisor: "Class Advisor",
    Stage.hod: "HOD",
    Stage.payment: "Lab Charges Payment",
    Stage.lab: "Lab Instructor",
}

ROLE_STAGES: Dict[Role, Tuple[Stage, ...]] = {
    Role.library: (Stage.library,),
    Role.hostel: (Stage.hostel,),
    Role.college_office: (Stage.college_office,),
    Role.faculty: (Stage.faculty,),
    Role.counsellor: (Stage.counsellor,),
    Role.class_advisor: (Stage.class_advisor,),
    Role.hod: (Stage.hod,),
    # payment and lab are decided together by one actor
    Role.lab_instructor: (Stage.payment, Stage.lab),
}

STAGE_ROLE: Dict[Stage, Role] = {
    stage: role for role, stages in ROLE_STAGES.items() for stage in stages
}

STAGE_PREREQUISITES: Dict[Stage, Tuple[Stage, ...]] = {
    Stage.faculty: (Stage.college_office,),
    Stage.counsellor: (Stage.college_office,),
    Stage.class_advisor: (Stage.college_office,),
    Stage.hod: (Stage.faculty, Stage.counsellor, Stage.class_advisor),
    Stage.payment: (Stage.hod,),
    Stage.lab: (Stage.hod,),
}

TRANSACTION_GATED = frozenset({Stage.payment, Stage.lab})

LOCAL_STAGES: Tuple[Stage, ...] = tuple(s for s in Stage if s is not Stage.hostel)
HOSTEL_STAGES: Tuple[Stage, ...] = tuple(Stage)


@dataclass(frozen=True)
class Evaluation:
    """Result of evaluating one verifier action."""

    role: Role
    decision: Decision
    stages: Tuple[Stage, ...]
    updated_flags: Dict[str, Any] = field(default_factory=dict)
    new_status: ApplicationStatus = ApplicationStatus.pending
    progress_percent: int = 0
    changed: bool = True
    # False when a faculty approval still waits on other subject assignments
    stage_complete: bool = True


def parse_role(role: Role | str) -> Role:
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).strip().lower())
    except ValueError:
        raise InvalidRoleError(f"Unknown role: {role!r}")


def parse_decision(decision: Decision | str) -> Decision:
    if isinstance(decision, Decision):
        return decision
    try:
        return Decision(str(decision).strip().lower())
    except ValueError:
        raise ValidationError(f"Decision must be 'approve' or 'reject', got {decision!r}")


def stages_for_role(role: Role | str) -> Tuple[Stage, ...]:
    parsed = parse_role(role)
    stages = ROLE_STAGES.get(parsed)
    if not stages:
        raise InvalidRoleError(f"Role {parsed.value!r} does not own a verification stage")
    return stages


def applicable_stages(student_type: StudentType) -> Tuple[Stage, ...]:
    return HOSTEL_STAGES if student_type == StudentType.hostel else LOCAL_STAGES


def stage_flag(application: Application, stage: Stage) -> Optional[bool]:
    return getattr(application, stage.flag_column)


def stage_comment(application: Application, stage: Stage) -> Optional[str]:
    return getattr(application, stage.comment_column)


def normalise_comment(comment: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    if comment is None:
        return None
    text = str(comment).strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"Comment must be at most {max_length} characters")
    return text


def missing_prerequisites(application: Application, stage: Stage) -> List[str]:
    missing = [
        STAGE_LABELS[pre]
        for pre in STAGE_PREREQUISITES.get(stage, ())
        if stage_flag(application, pre) is not True
    ]
    if stage in TRANSACTION_GATED and not (application.transaction_id or "").strip():
        missing.append("payment transaction id")
    return missing


def prerequisites_met(application: Application, stage: Stage) -> bool:
    return not missing_prerequisites(application, stage)


def count_verified(application: Application) -> Tuple[int, int]:
    stages = applicable_stages(application.student_type)
    verified = sum(1 for s in stages if stage_flag(application, s) is True)
    return verified, len(stages)


def compute_progress(application: Application) -> int:
    """Percentage of applicable stages verified, rounded half up.

    Local students have 8 applicable stages, hostel students 9. Integer
    arithmetic keeps 12.5 -> 13 (``round`` would give 12).
    """
    verified, total = count_verified(application)
    return (200 * verified + total) // (2 * total)


def derive_status(application: Application) -> ApplicationStatus:
    stages = applicable_stages(application.student_type)
    flags = {s: stage_flag(application, s) for s in stages}

    if any(v is False for v in flags.values()):
        return ApplicationStatus.rejected
    if all(v is True for v in flags.values()):
        return ApplicationStatus.completed
    if flags[Stage.payment] is True and flags[Stage.lab] is True:
        return ApplicationStatus.clearance_pending
    if flags[Stage.hod] is True and (application.transaction_id or "").strip():
        return ApplicationStatus.payment_pending
    if flags[Stage.hod] is True:
        return ApplicationStatus.hod_verified
    if all(flags[s] is True for s in STAGE_PREREQUISITES[Stage.hod]):
        return ApplicationStatus.hod_stage
    if flags[Stage.college_office] is True:
        return ApplicationStatus.faculty_stage
    return ApplicationStatus.pending


def is_closed(application: Application) -> bool:
    return derive_status(application) in (ApplicationStatus.rejected, ApplicationStatus.completed)


def can_act(application: Application, role: Role | str) -> bool:
    """True when ``role`` has an open, unblocked stage on the application."""
    try:
        stages = stages_for_role(role)
    except InvalidRoleError:
        return False
    if is_closed(application):
        return False
    applicable = applicable_stages(application.student_type)
    if any(s not in applicable for s in stages):
        return False
    if all(stage_flag(application, s) is True for s in stages):
        return False
    return all(prerequisites_met(application, s) for s in stages)


def unlocked_stages(before: Application, after: Application) -> List[Stage]:
    """Stages whose prerequisites became satisfied by the transition."""
    if is_closed(after):
        return []
    unlocked = []
    for stage in applicable_stages(after.student_type):
        if stage not in STAGE_PREREQUISITES or stage_flag(after, stage) is not None:
            continue
        if prerequisites_met(after, stage) and not prerequisites_met(before, stage):
            unlocked.append(stage)
    return unlocked


def evaluate(
    application: Application,
    acting_role: Role | str,
    decision: Decision | str,
    comment: Optional[str] = None,
    *,
    outstanding_assignments: int = 0,
    max_comment_length: Optional[int] = None,
) -> Evaluation:
    """Decide the effect of ``acting_role`` approving or rejecting.

    ``outstanding_assignments`` is the number of *other* subject assignments
    on the application that are not yet verified; it only matters for a
    faculty approval, which completes the faculty stage when it reaches zero.
    """
    role = parse_role(acting_role)
    stages = stages_for_role(role)
    verdict = parse_decision(decision)
    text = normalise_comment(comment, max_comment_length)

    if verdict is Decision.reject and not text:
        raise ValidationError("A comment is required when rejecting an application")

    applicable = applicable_stages(application.student_type)
    if any(s not in applicable for s in stages):
        raise PrecondOrderingError(
            f"{STAGE_LABELS[stages[0]]} verification does not apply to this student"
        )

    current = derive_status(application)
    progress = compute_progress(application)
    flags = [stage_flag(application, s) for s in stages]

    if verdict is Decision.approve and all(f is True for f in flags):
        return Evaluation(role, verdict, stages, {}, current, progress, changed=False)
    if verdict is Decision.reject and all(f is False for f in flags):
        return Evaluation(role, verdict, stages, {}, current, progress, changed=False)

    if current is ApplicationStatus.rejected:
        raise ApplicationClosedError("Application has been rejected and is closed")
    if current is ApplicationStatus.completed:
        raise ApplicationClosedError("Application is completed and can no longer change")

    for stage in stages:
        missing = missing_prerequisites(application, stage)
        if missing:
            raise PrecondOrderingError(
                f"{STAGE_LABELS[stage]} verification is not yet eligible; waiting on: "
                + ", ".join(missing)
            )

    comment_stage = stages[-1]

    if verdict is Decision.approve and role is Role.faculty and outstanding_assignments > 0:
        return Evaluation(
            role, verdict, stages, {}, current, progress, changed=True, stage_complete=False
        )

    value = verdict is Decision.approve
    patch: Dict[str, Any] = {s.flag_column: value for s in stages}
    patch[comment_stage.comment_column] = text

    updated = application.model_copy(update=patch)
    new_status = derive_status(updated)
    patch["status"] = new_status.value
    return Evaluation(
        role,
        verdict,
        stages,
        patch,
        new_status,
        compute_progress(updated),
        changed=True,
    )


def apply(application: Application, evaluation: Evaluation) -> Application:
    """Return a copy of ``application`` with the evaluation's patch applied."""
    if not evaluation.updated_flags:
        return application
    update = dict(evaluation.updated_flags)
    update["status"] = evaluation.new_status
    return application.model_copy(update=update)


def describe(application: Application) -> ApplicationProgress:
    """Single shared view of progress used by every screen."""
    verified, total = count_verified(application)
    return ApplicationProgress(
        application_id=application.id,
        student_type=application.student_type,
        status=derive_status(application),
        progress_percent=compute_progress(application),
        verified_stages=verified,
        applicable_stages=total,
        stages=[
            StageView(
                stage=stage,
                label=STAGE_LABELS[stage],
                verified=stage_flag(application, stage),
                comment=stage_comment(application, stage),
            )
            for stage in applicable_stages(application.student_type)
        ],
    )
