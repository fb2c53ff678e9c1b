import pytest

from nodex.common.errors import ForbiddenError, PrecondOrderingError
from nodex.features.applications.schemas import ApplicationStatus
from nodex.features.profiles.schemas import StudentType
from nodex.features.workflow import rules
from nodex.features.workflow.schemas import Decision

from tests.fakesupabase import ADMIN, FACULTY_A, FACULTY_B, HOD, HOSTEL_STUDENT, MECH_HOD, STUDENT
from tests.helpers import PRE_PAYMENT, VERIFIERS, actor, approve, pay, submit

pytestmark = pytest.mark.anyio("asyncio")

ADMIN_ACTOR = actor(ADMIN, "admin")


async def test_progress_view_matches_tracker(workflow):
    local_id = await submit(workflow, STUDENT)
    hostel_id = await submit(workflow, HOSTEL_STUDENT)
    await approve(workflow, local_id, "library")
    await approve(workflow, hostel_id, "library")

    local = await workflow.get_progress(local_id, actor(STUDENT, "student"))
    hostel = await workflow.get_progress(hostel_id, actor(HOSTEL_STUDENT, "student"))
    assert (local.progress_percent, local.applicable_stages) == (13, 8)
    assert (hostel.progress_percent, hostel.applicable_stages) == (11, 9)
    assert hostel.student_type is StudentType.hostel

    tracker = await workflow.tracker_summary("2023-27", "CSE", ADMIN_ACTOR)
    by_id = {row.application_id: row.progress_percent for row in tracker.applications}
    assert by_id == {local_id: 13, hostel_id: 11}


async def test_students_only_see_their_own_progress(workflow):
    app_id = await submit(workflow, STUDENT)
    with pytest.raises(ForbiddenError):
        await workflow.get_progress(app_id, actor(HOSTEL_STUDENT, "student"))


async def test_tracker_counts(workflow):
    done = await submit(workflow, STUDENT)
    rejected = await submit(workflow, HOSTEL_STUDENT)
    await approve(workflow, done, *PRE_PAYMENT)
    await pay(workflow, done)
    await approve(workflow, done, "lab_instructor")
    await workflow.verify(rejected, VERIFIERS["library"], Decision.reject, "fine pending")

    summary = await workflow.tracker_summary("2023-27", "cse", actor(HOD, "hod"))

    assert (summary.total, summary.completed, summary.rejected, summary.in_progress) == (2, 1, 1, 0)
    statuses = {row.application_id: row.status for row in summary.applications}
    assert statuses == {done: ApplicationStatus.completed, rejected: ApplicationStatus.rejected}


async def test_tracker_is_limited_to_admin_and_own_department_hod(workflow):
    with pytest.raises(ForbiddenError):
        await workflow.tracker_summary("2023-27", "CSE", actor(MECH_HOD, "hod"))
    with pytest.raises(ForbiddenError):
        await workflow.tracker_summary("2023-27", "CSE", actor(STUDENT, "student"))


async def test_queue_lists_actionable_applications(workflow):
    app_id = await submit(workflow, STUDENT, two_faculty=True)

    assert [p.application_id for p in await workflow.list_queue(VERIFIERS["library"])] == [app_id]
    assert [p.application_id for p in await workflow.list_queue(VERIFIERS["college_office"])] == [app_id]
    assert await workflow.list_queue(VERIFIERS["faculty"]) == []

    await approve(workflow, app_id, "college_office")
    assert [p.application_id for p in await workflow.list_queue(actor(FACULTY_A, "faculty"))] == [app_id]
    assert await workflow.list_queue(VERIFIERS["college_office"]) == []
    # local student: nothing for the hostel warden
    assert await workflow.list_queue(VERIFIERS["hostel"]) == []

    await workflow.verify(app_id, actor(FACULTY_A, "faculty"), Decision.approve)
    assert await workflow.list_queue(actor(FACULTY_A, "faculty")) == []
    assert [p.application_id for p in await workflow.list_queue(actor(FACULTY_B, "faculty"))] == [app_id]


async def test_certificate_for_completed_application(workflow):
    app_id = await submit(workflow, STUDENT)
    await approve(workflow, app_id, *PRE_PAYMENT)
    await pay(workflow, app_id)
    await workflow.verify(app_id, VERIFIERS["lab_instructor"], Decision.approve, "lab dues cleared")

    cert = await workflow.certificate_data(app_id, actor(STUDENT, "student"))

    assert cert.student_name == "Asha Rao"
    assert cert.usn == "4XX23CS001"
    assert cert.transaction_id == "TXN-42"
    assert [c.label for c in cert.clearances] == [
        rules.STAGE_LABELS[s] for s in rules.applicable_stages(StudentType.local)
    ]
    lab = next(c for c in cert.clearances if c.label == "Lab Instructor")
    assert lab.comment == "lab dues cleared"
    assert all(c.verified_on == cert.issued_on for c in cert.clearances)

    admin_view = await workflow.certificate_data(app_id, ADMIN_ACTOR)
    assert admin_view.application_id == app_id


async def test_certificate_requires_completion_and_ownership(workflow):
    app_id = await submit(workflow, STUDENT)
    await approve(workflow, app_id, "library")
    with pytest.raises(PrecondOrderingError):
        await workflow.certificate_data(app_id, actor(STUDENT, "student"))
    with pytest.raises(ForbiddenError):
        await workflow.certificate_data(app_id, actor(HOSTEL_STUDENT, "student"))
    with pytest.raises(ForbiddenError):
        await workflow.certificate_data(app_id, VERIFIERS["hod"])
