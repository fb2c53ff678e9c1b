from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from nodex.common.errors import (
    ApplicationClosedError,
    ApplicationNotFoundError,
    ConcurrentModificationError,
    DuplicateApplicationError,
    DuplicateRecordError,
    ForbiddenError,
    InvalidFacultyError,
    InvalidSubjectError,
    NotProfileCompletedError,
    PrecondOrderingError,
    ValidationError,
)
from nodex.common.utils import current_timestamp, format_timestamp, is_uuid, unique
from nodex.core.config import Settings, get_settings
from nodex.db.store import EntityStore
from nodex.features.applications.repository import APPLICATIONS_TABLE, ApplicationRepository
from nodex.features.applications.schemas import Application, ApplicationStatus, SubjectFacultyAssignment
from nodex.features.audit.repository import AuditLog
from nodex.features.notifications.routing import VERIFIER_NOTICES
from nodex.features.notifications.schemas import NotificationCreate, NotificationType
from nodex.features.notifications.service import NotificationService
from nodex.features.profiles.repository import ProfileRepository
from nodex.features.profiles.schemas import Role, StudentType
from . import rules
from .schemas import (
    Actor,
    ApplicationProgress,
    ApplicationSubmission,
    CertificateData,
    ClearanceItem,
    Decision,
    DeletionSummary,
    PaymentOutcome,
    Stage,
    SubmissionOutcome,
    TrackerRow,
    TrackerSummary,
    VerificationOutcome,
)

logger = logging.getLogger("workflow.service")

# Roles whose verifiers only see applications from their own department.
DEPARTMENT_SCOPED = frozenset(
    {Role.faculty, Role.counsellor, Role.class_advisor, Role.hod, Role.lab_instructor}
)

MAX_TRANSACTION_ID_LENGTH = 100


def _first_error(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid submission"
    err = errors[0]
    field = " -> ".join(str(loc) for loc in err.get("loc", ()))
    msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


def _outcome_notice(
    role: Role,
    evaluation: rules.Evaluation,
    comment: Optional[str],
    outstanding: int,
) -> Tuple[str, str, NotificationType]:
    label = rules.STAGE_LABELS[evaluation.stages[-1]]
    if evaluation.decision is Decision.reject:
        return (
            "Application Rejected",
            f"Your no-due application was rejected by {label}. Reason: {comment}",
            NotificationType.rejection,
        )
    if not evaluation.stage_complete:
        return (
            "Subject Verification Approved",
            f"A faculty member verified your subject. {outstanding} subject verification(s) still pending.",
            NotificationType.info,
        )
    if evaluation.new_status is ApplicationStatus.completed:
        return (
            "No Due Certificate Approved!",
            "Congratulations! Your no-due certificate is ready and can now be downloaded.",
            NotificationType.success,
        )
    message = f"Your no-due application has been verified by {label}."
    if role is Role.hod:
        message += " You can now submit your lab charges payment."
    if comment:
        message += f" {comment}"
    return f"{label} Verification Approved", message, NotificationType.approval


class WorkflowService:
    """Sequences the effectful steps of every clearance action.

    The application row is the source of truth: notification and audit
    writes are best-effort and never undo a committed decision.
    """

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        *,
        applications: Optional[ApplicationRepository] = None,
        profiles: Optional[ProfileRepository] = None,
        notifications: Optional[NotificationService] = None,
        audit: Optional[AuditLog] = None,
        settings: Optional[Settings] = None,
    ):
        store = store or EntityStore()
        self.applications = applications or ApplicationRepository(store)
        self.profiles = profiles or ProfileRepository(store)
        self.notifications = notifications or NotificationService(store=store)
        self.audit = audit or AuditLog(store)
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------ submit
    async def submit_application(
        self,
        student_id: str,
        department: str,
        semester: int,
        batch: str,
        subjects: Sequence[Any],
    ) -> SubmissionOutcome:
        try:
            submission = ApplicationSubmission(
                department=department,
                semester=semester,
                batch=batch,
                subjects=list(subjects),
            )
        except PydanticValidationError as exc:
            raise ValidationError(_first_error(exc)) from exc

        student = await self.profiles.get_student(student_id)
        if not student or not student.profile_completed:
            raise NotProfileCompletedError("Profile must be completed before submitting application")

        if await self.applications.find_existing(student_id, submission.semester, submission.batch):
            raise DuplicateApplicationError(
                "You have already submitted an application for this semester and batch"
            )

        subject_ids = unique([str(p.subject_id) for p in submission.subjects])
        found_subjects = {s.id for s in await self.profiles.get_subjects(subject_ids)}
        if any(sid not in found_subjects for sid in subject_ids):
            raise InvalidSubjectError("One or more subjects are invalid")

        faculty_ids = unique([str(p.faculty_id) for p in submission.subjects])
        active_faculty = {f.id for f in await self.profiles.get_active_staff(faculty_ids)}
        if any(fid not in active_faculty for fid in faculty_ids):
            raise InvalidFacultyError("One or more faculty members are invalid or inactive")

        now = format_timestamp(current_timestamp())
        try:
            created = await self.applications.create(
                {
                    "student_id": student_id,
                    "department": submission.department,
                    "semester": submission.semester,
                    "batch": submission.batch,
                    "status": ApplicationStatus.pending.value,
                    "created_at": now,
                    "updated_at": now,
                }
            )
        except DuplicateRecordError as exc:
            raise DuplicateApplicationError(
                "You have already submitted an application for this semester and batch"
            ) from exc
        application_id = str(created["id"])

        mappings = [
            {
                "application_id": application_id,
                "subject_id": str(p.subject_id),
                "faculty_id": str(p.faculty_id),
                "faculty_verified": False,
            }
            for p in submission.subjects
        ]
        try:
            await self.applications.create_assignments(mappings)
        except Exception:
            logger.error("Assignment creation failed; rolling back application %s", application_id)
            await self._rollback_application(application_id)
            raise

        await self.audit.record(
            "CREATE_APPLICATION",
            APPLICATIONS_TABLE,
            application_id,
            {
                "department": submission.department,
                "semester": submission.semester,
                "batch": submission.batch,
                "subject_count": len(mappings),
            },
            actor_id=student_id,
        )

        library_staff = await self._recipients_safely(Role.library, None)
        await self._notify_bulk_safely(
            NotificationCreate(
                user_id=uid,
                title=VERIFIER_NOTICES[Role.library],
                message=(
                    "A new no due application has been submitted for "
                    f"{submission.department} - Semester {submission.semester}"
                ),
                type=NotificationType.info,
                related_entity_type="application",
                related_entity_id=application_id,
            )
            for uid in library_staff
        )

        logger.info("Application created: %s", application_id)
        return SubmissionOutcome(application_id=application_id, assignments_created=len(mappings))

    async def _rollback_application(self, application_id: str) -> None:
        try:
            await self.applications.delete_many([application_id])
        except Exception as e:  # noqa: BLE001
            logger.error("Rollback of application %s failed: %s", application_id, e)

    # ------------------------------------------------------------------ verify
    async def verify(
        self,
        application_id: str,
        actor: Actor,
        decision: Decision | str,
        comment: Optional[str] = None,
    ) -> VerificationOutcome:
        role = rules.parse_role(actor.role)
        rules.stages_for_role(role)
        verdict = rules.parse_decision(decision)

        application = await self._load(application_id)
        await self._authorize_verifier(actor, role, application)

        outstanding = 0
        assignments: List[SubjectFacultyAssignment] = []
        if role is Role.faculty:
            assignments = await self.applications.get_assignments(application.id)
            own = [a for a in assignments if a.faculty_id == actor.user_id]
            if not own:
                raise ForbiddenError("You are not assigned to verify any subject on this application")
            outstanding = self._outstanding(assignments, actor.user_id)
            already_done = all(a.faculty_verified is True for a in own)
            if verdict is Decision.approve and already_done and outstanding:
                return self._outcome(application, role, verdict, changed=False, stage_complete=False)

        evaluation = rules.evaluate(
            application,
            role,
            verdict,
            comment,
            outstanding_assignments=outstanding,
            max_comment_length=self.settings.comment_max_length,
        )
        if not evaluation.changed:
            return self._outcome(application, role, verdict, changed=False)

        text = rules.normalise_comment(comment)
        if role is Role.faculty:
            # assignment rows land before the application row, so the stage
            # decision below is taken on what the store holds now
            await self.applications.set_assignments_verified(
                application.id, actor.user_id, verdict is Decision.approve, text
            )
            assignments = await self.applications.get_assignments(application.id)
            fresh = self._outstanding(assignments, actor.user_id)
            if fresh != outstanding:
                outstanding = fresh
                evaluation = rules.evaluate(
                    application,
                    role,
                    verdict,
                    comment,
                    outstanding_assignments=outstanding,
                    max_comment_length=self.settings.comment_max_length,
                )

        now = current_timestamp()
        patch: Dict[str, Any] = dict(evaluation.updated_flags)
        patch["updated_at"] = format_timestamp(now)

        rows = await self.applications.update_if_unchanged(application.id, application.updated_at, patch)
        if not rows:
            await self._raise_write_conflict(application)

        updated = rules.apply(application, evaluation).model_copy(update={"updated_at": now})
        stage = evaluation.stages[-1]
        if evaluation.stage_complete:
            action = f"VERIFY_{stage.value.upper()}_{'APPROVED' if verdict is Decision.approve else 'REJECTED'}"
        else:
            action = "VERIFY_FACULTY_SUBJECT_APPROVED"
        await self.audit.record(
            action,
            APPLICATIONS_TABLE,
            application.id,
            {
                "role": role.value,
                "decision": verdict.value,
                "stages": [s.value for s in evaluation.stages],
                "comment": text,
                "status": evaluation.new_status.value,
                "progress_percent": evaluation.progress_percent,
                "outstanding_assignments": outstanding,
                "verified_at": format_timestamp(now),
            },
            actor_id=actor.user_id,
        )

        title, message, ntype = _outcome_notice(role, evaluation, text, outstanding)
        await self._notify_safely(
            user_id=application.student_id,
            title=title,
            message=message,
            type_=ntype,
            related_entity_type="application",
            related_entity_id=application.id,
        )

        for next_stage in rules.unlocked_stages(application, updated):
            await self._announce_stage(updated, next_stage, assignments)

        logger.info(
            "Application %s %s by %s -> %s (%d%%)",
            application.id,
            verdict.value,
            role.value,
            evaluation.new_status.value,
            evaluation.progress_percent,
        )
        return self._outcome(
            updated, role, verdict, changed=True, stage_complete=evaluation.stage_complete
        )

    async def verify_with_retry(
        self,
        application_id: str,
        actor: Actor,
        decision: Decision | str,
        comment: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> VerificationOutcome:
        """Re-read and retry on write conflicts, up to ``max_attempts`` tries."""
        attempts = max_attempts or self.settings.verify_max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await self.verify(application_id, actor, decision, comment)
            except ConcurrentModificationError:
                if attempt >= attempts:
                    raise
                logger.warning(
                    "Write conflict on application %s (attempt %d/%d); retrying",
                    application_id,
                    attempt,
                    attempts,
                )
        raise ConcurrentModificationError(f"Application {application_id} kept changing")

    # ----------------------------------------------------------------- payment
    async def submit_payment(
        self,
        application_id: str,
        transaction_id: str,
        submitter_name: str,
        actor: Actor,
    ) -> PaymentOutcome:
        txn = (transaction_id or "").strip()
        name = (submitter_name or "").strip()
        if not txn or not name:
            raise ValidationError("Transaction id and submitter name are required")
        if len(txn) > MAX_TRANSACTION_ID_LENGTH:
            raise ValidationError(f"Transaction id must be at most {MAX_TRANSACTION_ID_LENGTH} characters")

        application = await self._load(application_id)
        if actor.role is not Role.student or actor.user_id != application.student_id:
            raise ForbiddenError("Only the applying student can submit payment details")

        status = rules.derive_status(application)
        if status is ApplicationStatus.rejected:
            raise ApplicationClosedError("Application has been rejected and is closed")
        if application.payment_verified is True:
            raise PrecondOrderingError("Payment already completed")
        if application.hod_verified is not True:
            raise PrecondOrderingError("Payment can only be done after HOD verification")

        now = current_timestamp()
        patch: Dict[str, Any] = {
            "transaction_id": txn,
            "payment_comment": f"Payment submitted by {name}",
        }
        updated = application.model_copy(update=patch)
        new_status = rules.derive_status(updated)
        patch["status"] = new_status.value
        patch["updated_at"] = format_timestamp(now)

        rows = await self.applications.update_if_unchanged(application.id, application.updated_at, patch)
        if not rows:
            await self._raise_write_conflict(application)

        await self.audit.record(
            "PAYMENT_SUBMITTED",
            APPLICATIONS_TABLE,
            application.id,
            {"transaction_id": txn, "submitted_by": name},
            actor_id=actor.user_id,
        )
        await self._notify_safely(
            user_id=application.student_id,
            title="Payment Details Submitted",
            message="Your lab charge payment details have been submitted for verification.",
            type_=NotificationType.info,
            related_entity_type="application",
            related_entity_id=application.id,
        )

        instructors = await self._recipients_safely(Role.lab_instructor, application.department)
        if not instructors:
            logger.warning("No active lab instructors found for department %s", application.department)
        notified = await self._notify_bulk_safely(
            NotificationCreate(
                user_id=uid,
                title=VERIFIER_NOTICES[Role.lab_instructor],
                message=(
                    f"{name} from {application.department} has submitted payment details "
                    f"(transaction {txn}) for verification."
                ),
                type=NotificationType.info,
                related_entity_type="application",
                related_entity_id=application.id,
            )
            for uid in instructors
        )
        return PaymentOutcome(
            application_id=application.id,
            transaction_id=txn,
            status=new_status,
            notified_lab_instructors=notified,
        )

    # ------------------------------------------------------------------ delete
    async def delete_application(self, application_id: str, actor: Actor) -> DeletionSummary:
        await self._require_admin(actor)
        if not is_uuid(application_id):
            raise ValidationError(f"Invalid application id: {application_id!r}")
        if await self.applications.get(application_id) is None:
            raise ApplicationNotFoundError(f"Application {application_id} not found")

        summary = await self._cascade_delete([application_id])
        await self.audit.record(
            "DELETE_APPLICATION",
            APPLICATIONS_TABLE,
            application_id,
            {**summary.model_dump(), "performed_by": actor.user_id},
            actor_id=actor.user_id,
        )
        return summary

    async def delete_all_applications(self, batch: str, department: str, actor: Actor) -> DeletionSummary:
        await self._require_admin(actor)
        batch = (batch or "").strip()
        department = (department or "").strip().upper()
        if not batch or not department:
            raise ValidationError("Batch and department are required")

        application_ids = await self.applications.list_ids(batch, department)
        if not application_ids:
            logger.info("No applications found for batch %s, department %s", batch, department)
            return DeletionSummary()

        logger.info("Deleting %d applications for batch %s, department %s", len(application_ids), batch, department)
        summary = await self._cascade_delete(application_ids)
        await self.audit.record(
            "DELETE_ALL_APPLICATIONS",
            APPLICATIONS_TABLE,
            None,
            {"batch": batch, "department": department, **summary.model_dump(), "performed_by": actor.user_id},
            actor_id=actor.user_id,
        )
        return summary

    async def _cascade_delete(self, application_ids: List[str]) -> DeletionSummary:
        assignments = await self.applications.delete_assignments(application_ids)
        notifications = await self.applications.delete_related_notifications(application_ids)
        applications = await self.applications.delete_many(application_ids)
        logger.info(
            "Deleted %d applications, %d faculty assignments, %d notifications",
            applications,
            assignments,
            notifications,
        )
        return DeletionSummary(
            deleted_applications=applications,
            deleted_faculty_assignments=assignments,
            deleted_notifications=notifications,
        )

    # ----------------------------------------------------------------- queries
    async def get_progress(self, application_id: str, actor: Actor) -> ApplicationProgress:
        application = await self._load(application_id)
        if actor.role is Role.student and actor.user_id != application.student_id:
            raise ForbiddenError("Students may only view their own application")
        return rules.describe(application)

    async def list_queue(self, actor: Actor) -> List[ApplicationProgress]:
        """Applications the actor can approve or reject right now."""
        role = rules.parse_role(actor.role)
        rules.stages_for_role(role)
        staff = await self.profiles.get_staff(actor.user_id)
        if staff is None or not staff.is_active:
            raise ForbiddenError("Only active staff have a verification queue")

        pending_own: Optional[set] = None
        if role is Role.faculty:
            own = await self.applications.assignments_for_faculty(actor.user_id)
            pending_own = {a.application_id for a in own if a.faculty_verified is not True}
            rows = await self.applications.list_by_ids(sorted(pending_own))
        elif role in DEPARTMENT_SCOPED:
            if not staff.department:
                return []
            rows = await self.applications.list_by_department(staff.department)
        else:
            rows = await self.applications.list_all()

        queue = []
        for application in await self._with_student_types(rows):
            if pending_own is not None and application.id not in pending_own:
                continue
            if rules.can_act(application, role):
                queue.append(rules.describe(application))
        return queue

    async def tracker_summary(self, batch: str, department: str, actor: Actor) -> TrackerSummary:
        if actor.role not in (Role.admin, Role.hod):
            raise ForbiddenError("Only administrators and HODs can view the tracker")
        if actor.role is Role.admin:
            await self._require_admin(actor)
        department = (department or "").strip().upper()
        if actor.role is Role.hod:
            if not await self.profiles.has_role(actor.user_id, Role.hod):
                raise ForbiddenError("User does not hold the hod role")
            staff = await self.profiles.get_staff(actor.user_id)
            if staff is None or staff.department != department:
                raise ForbiddenError("HODs can only track their own department")

        rows = await self.applications.list_by_department(department, batch=batch)
        tracked = []
        for application in await self._with_student_types(rows):
            view = rules.describe(application)
            tracked.append(
                TrackerRow(
                    application_id=application.id,
                    student_id=application.student_id,
                    semester=application.semester,
                    status=view.status,
                    progress_percent=view.progress_percent,
                    created_at=application.created_at,
                )
            )
        completed = sum(1 for r in tracked if r.status is ApplicationStatus.completed)
        rejected = sum(1 for r in tracked if r.status is ApplicationStatus.rejected)
        return TrackerSummary(
            batch=batch,
            department=department,
            total=len(tracked),
            in_progress=len(tracked) - completed - rejected,
            completed=completed,
            rejected=rejected,
            applications=tracked,
        )

    async def certificate_data(self, application_id: str, actor: Actor) -> CertificateData:
        application = await self._load(application_id)
        if actor.role is Role.admin:
            await self._require_admin(actor)
        elif actor.role is not Role.student or actor.user_id != application.student_id:
            raise ForbiddenError("Only the student or an administrator can view the certificate")
        if rules.derive_status(application) is not ApplicationStatus.completed:
            raise PrecondOrderingError("Certificate is available once every stage is verified")

        student = await self.profiles.get_student(application.student_id)
        return CertificateData(
            application_id=application.id,
            student_name=student.name if student else None,
            usn=student.usn if student else None,
            department=application.department,
            semester=application.semester,
            batch=application.batch,
            section=student.section if student else None,
            student_type=application.student_type,
            transaction_id=application.transaction_id,
            issued_on=application.updated_at,
            clearances=[
                ClearanceItem(
                    label=rules.STAGE_LABELS[stage],
                    # one timestamp per application; see audit log for per-stage times
                    verified_on=application.updated_at,
                    comment=rules.stage_comment(application, stage),
                )
                for stage in rules.applicable_stages(application.student_type)
            ],
        )

    # ----------------------------------------------------------------- helpers
    async def _load(self, application_id: str) -> Application:
        if not is_uuid(application_id):
            raise ValidationError(f"Invalid application id: {application_id!r}")
        application = await self.applications.get(application_id)
        if application is None:
            raise ApplicationNotFoundError(f"Application {application_id} not found")
        student = await self.profiles.get_student(application.student_id)
        student_type = student.student_type if student else StudentType.local
        return application.model_copy(update={"student_type": student_type})

    async def _with_student_types(self, rows: List[Dict[str, Any]]) -> List[Application]:
        student_ids = unique([str(r["student_id"]) for r in rows])
        types = {s.id: s.student_type for s in await self.profiles.get_students(student_ids)}
        return [
            Application(**{**row, "student_type": types.get(str(row["student_id"]), StudentType.local)})
            for row in rows
        ]

    async def _authorize_verifier(self, actor: Actor, role: Role, application: Application) -> None:
        if not await self.profiles.has_role(actor.user_id, role):
            raise ForbiddenError(f"User does not hold the {role.value} role")
        staff = await self.profiles.get_staff(actor.user_id)
        if staff is None or not staff.is_active:
            raise ForbiddenError("Only active staff can verify applications")
        if role in DEPARTMENT_SCOPED and staff.department and staff.department != application.department:
            raise ForbiddenError(f"{role.value} can only verify applications from {staff.department}")

    async def _require_admin(self, actor: Actor) -> None:
        if actor.role is not Role.admin or not await self.profiles.has_role(actor.user_id, Role.admin):
            raise ForbiddenError("Unauthorized: Admin role required")

    async def _raise_write_conflict(self, application: Application) -> None:
        fresh = await self.applications.get(application.id)
        if fresh is None:
            raise ApplicationNotFoundError(f"Application {application.id} was deleted")
        if fresh.updated_at != application.updated_at:
            raise ConcurrentModificationError(
                f"Application {application.id} was modified concurrently; re-read and retry"
            )
        raise ForbiddenError("The store refused to update this application")

    async def _announce_stage(
        self, application: Application, stage: Stage, assignments: List[SubjectFacultyAssignment]
    ) -> None:
        role = rules.STAGE_ROLE[stage]
        if role is Role.faculty:
            if not assignments:
                assignments = await self._assignments_safely(application.id)
            recipients = unique([a.faculty_id for a in assignments if a.faculty_verified is not True])
        else:
            department = application.department if role in DEPARTMENT_SCOPED else None
            recipients = await self._recipients_safely(role, department)

        label = rules.STAGE_LABELS[stage]
        await self._notify_bulk_safely(
            NotificationCreate(
                user_id=uid,
                title=VERIFIER_NOTICES[role],
                message=(
                    f"An application from {application.department} - Semester {application.semester} "
                    f"is ready for {label} verification."
                ),
                type=NotificationType.info,
                related_entity_type="application",
                related_entity_id=application.id,
            )
            for uid in recipients
        )

    async def _assignments_safely(self, application_id: str) -> List[SubjectFacultyAssignment]:
        try:
            return await self.applications.get_assignments(application_id)
        except Exception as e:  # noqa: BLE001
            logger.error("Could not load assignments for %s: %s", application_id, e)
            return []

    async def _recipients_safely(self, role: Role, department: Optional[str]) -> List[str]:
        try:
            return await self.profiles.user_ids_with_role(role, department)
        except Exception as e:  # noqa: BLE001
            logger.error("Could not resolve %s recipients (department=%s): %s", role.value, department, e)
            return []

    async def _notify_safely(self, **kwargs: Any) -> bool:
        try:
            await self.notifications.notify(**kwargs)
            return True
        except Exception as e:  # noqa: BLE001
            logger.error(
                "Notification to %s failed (entity=%s): %s",
                kwargs.get("user_id"),
                kwargs.get("related_entity_id"),
                e,
            )
            return False

    async def _notify_bulk_safely(self, items: Iterable[NotificationCreate]) -> int:
        batch = list(items)
        if not batch:
            return 0
        try:
            created = await self.notifications.notify_bulk(batch)
            return len(created)
        except Exception as e:  # noqa: BLE001
            logger.error("Bulk notification of %d recipients failed: %s", len(batch), e)
            return 0

    @staticmethod
    def _outstanding(assignments: Sequence[SubjectFacultyAssignment], faculty_id: str) -> int:
        return sum(1 for a in assignments if a.faculty_id != faculty_id and a.faculty_verified is not True)

    @staticmethod
    def _outcome(
        application: Application,
        role: Role,
        decision: Decision,
        *,
        changed: bool,
        stage_complete: bool = True,
    ) -> VerificationOutcome:
        return VerificationOutcome(
            application_id=application.id,
            role=role,
            decision=decision,
            status=rules.derive_status(application),
            progress_percent=rules.compute_progress(application),
            changed=changed,
            stage_complete=stage_complete,
        )


_workflow_service: Optional[WorkflowService] = None


def get_workflow_service() -> WorkflowService:
    global _workflow_service
    if _workflow_service is None:
        _workflow_service = WorkflowService()
    return _workflow_service
