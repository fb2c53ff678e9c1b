import pytest

from nodex.common.errors import (
    ApplicationClosedError,
    InvalidRoleError,
    PrecondOrderingError,
    ValidationError,
)
from nodex.features.applications.schemas import Application, ApplicationStatus
from nodex.features.profiles.schemas import Role, StudentType
from nodex.features.workflow import rules
from nodex.features.workflow.schemas import Decision, Stage


def make_app(student_type: str = "local", **flags) -> Application:
    return Application(
        id="app-1",
        student_id="student-1",
        department="CSE",
        semester=5,
        batch="2023-27",
        student_type=student_type,
        **flags,
    )


def all_verified(student_type: str = "local", **overrides) -> Application:
    flags = {s.flag_column: True for s in rules.applicable_stages(StudentType(student_type))}
    flags["transaction_id"] = "TXN-1"
    flags.update(overrides)
    return make_app(student_type, **flags)


HOD_DONE = dict(
    library_verified=True,
    college_office_verified=True,
    faculty_verified=True,
    counsellor_verified=True,
    class_advisor_verified=True,
    hod_verified=True,
)


def test_local_student_fully_verified_is_complete():
    app = all_verified("local")
    assert rules.compute_progress(app) == 100
    assert rules.derive_status(app) is ApplicationStatus.completed


def test_hostel_student_missing_hostel_stage_is_not_complete():
    app = all_verified("hostel", hostel_verified=None)
    assert rules.compute_progress(app) == 89
    assert rules.derive_status(app) is not ApplicationStatus.completed


def test_progress_rounds_half_up():
    # 1 of 8 local stages is 12.5%
    assert rules.compute_progress(make_app(library_verified=True)) == 13
    assert rules.compute_progress(make_app("hostel", library_verified=True)) == 11


def test_applicable_stage_counts():
    assert len(rules.applicable_stages(StudentType.local)) == 8
    assert len(rules.applicable_stages(StudentType.hostel)) == 9
    assert Stage.hostel not in rules.applicable_stages(StudentType.local)


def test_college_office_rejection_before_faculty_stage():
    result = rules.evaluate(make_app(), Role.college_office, Decision.reject, "missing dues")

    assert result.new_status is ApplicationStatus.rejected
    assert result.updated_flags["college_office_verified"] is False
    assert result.updated_flags["college_office_comment"] == "missing dues"
    for stage in (Stage.faculty, Stage.counsellor, Stage.class_advisor, Stage.hod, Stage.payment, Stage.lab):
        assert stage.flag_column not in result.updated_flags


@pytest.mark.parametrize("comment", [None, "", "   "])
def test_rejection_requires_comment(comment):
    with pytest.raises(ValidationError):
        rules.evaluate(make_app(), Role.library, Decision.reject, comment)


def test_faculty_before_college_office_is_not_eligible():
    with pytest.raises(PrecondOrderingError, match="College Office"):
        rules.evaluate(make_app(), Role.faculty, Decision.approve)


def test_hod_requires_all_three_department_stages():
    app = make_app(college_office_verified=True, faculty_verified=True, counsellor_verified=True)
    with pytest.raises(PrecondOrderingError, match="Class Advisor"):
        rules.evaluate(app, Role.hod, Decision.approve)


def test_hostel_role_does_not_apply_to_local_student():
    with pytest.raises(PrecondOrderingError):
        rules.evaluate(make_app("local"), Role.hostel, Decision.approve)


def test_lab_instructor_sets_payment_and_lab_together():
    app = make_app(transaction_id="TXN-1", **HOD_DONE)
    result = rules.evaluate(app, Role.lab_instructor, Decision.approve, "paid")

    assert result.updated_flags["payment_verified"] is True
    assert result.updated_flags["lab_verified"] is True
    assert result.updated_flags["lab_comment"] == "paid"
    assert result.new_status is ApplicationStatus.completed
    assert result.progress_percent == 100


def test_lab_instructor_needs_transaction_id():
    app = make_app(**HOD_DONE)
    with pytest.raises(PrecondOrderingError, match="transaction"):
        rules.evaluate(app, Role.lab_instructor, Decision.approve)


def test_lab_rejection_clears_both_fused_flags():
    app = make_app(transaction_id="TXN-1", **HOD_DONE)
    result = rules.evaluate(app, Role.lab_instructor, Decision.reject, "amount mismatch")
    assert result.updated_flags["payment_verified"] is False
    assert result.updated_flags["lab_verified"] is False
    assert result.new_status is ApplicationStatus.rejected


def test_reapproval_is_a_no_op():
    app = make_app(library_verified=True)
    result = rules.evaluate(app, Role.library, Decision.approve)
    assert result.changed is False
    assert result.updated_flags == {}
    assert result.progress_percent == rules.compute_progress(app)


def test_repeat_approval_on_completed_application_is_still_a_no_op():
    result = rules.evaluate(all_verified(), Role.hod, Decision.approve)
    assert result.changed is False
    assert result.new_status is ApplicationStatus.completed


def test_rejected_application_is_closed_to_other_stages():
    app = make_app(library_verified=False, library_comment="fine unpaid")
    with pytest.raises(ApplicationClosedError):
        rules.evaluate(app, Role.college_office, Decision.approve)


def test_completed_application_cannot_be_rejected():
    with pytest.raises(ApplicationClosedError):
        rules.evaluate(all_verified(), Role.library, Decision.reject, "changed my mind")


def test_faculty_approval_waits_for_other_assignments():
    app = make_app(college_office_verified=True)
    partial = rules.evaluate(app, Role.faculty, Decision.approve, outstanding_assignments=1)
    assert partial.changed is True
    assert partial.stage_complete is False
    assert partial.updated_flags == {}

    final = rules.evaluate(app, Role.faculty, Decision.approve, outstanding_assignments=0)
    assert final.updated_flags["faculty_verified"] is True


@pytest.mark.parametrize("role", ["admin", "student", "janitor"])
def test_roles_without_a_stage_are_invalid(role):
    with pytest.raises(InvalidRoleError):
        rules.evaluate(make_app(), role, Decision.approve)


def test_decision_must_be_approve_or_reject():
    with pytest.raises(ValidationError):
        rules.evaluate(make_app(), Role.library, "maybe")


def test_comment_length_is_capped():
    with pytest.raises(ValidationError):
        rules.evaluate(make_app(), Role.library, Decision.reject, "x" * 11, max_comment_length=10)


@pytest.mark.parametrize(
    "flags, expected",
    [
        ({}, ApplicationStatus.pending),
        ({"college_office_verified": True}, ApplicationStatus.faculty_stage),
        (
            {"college_office_verified": True, "faculty_verified": True, "counsellor_verified": True, "class_advisor_verified": True},
            ApplicationStatus.hod_stage,
        ),
        (HOD_DONE, ApplicationStatus.hod_verified),
        ({**HOD_DONE, "transaction_id": "TXN-1"}, ApplicationStatus.payment_pending),
        ({"payment_verified": True, "lab_verified": True}, ApplicationStatus.clearance_pending),
        ({"hod_verified": True, "counsellor_verified": False}, ApplicationStatus.rejected),
    ],
)
def test_derive_status(flags, expected):
    assert rules.derive_status(make_app(**flags)) is expected


def test_legacy_status_values_are_tolerated():
    app = make_app(status="faculty_verified")
    assert app.status is ApplicationStatus.pending


def test_can_act_follows_prerequisites():
    app = make_app(library_verified=True)
    assert rules.can_act(app, Role.library) is False
    assert rules.can_act(app, Role.college_office) is True
    assert rules.can_act(app, Role.faculty) is False
    assert rules.can_act(app, Role.hostel) is False
    assert rules.can_act(app, Role.admin) is False


def test_unlocked_stages_after_college_office():
    before = make_app()
    after = make_app(college_office_verified=True)
    assert rules.unlocked_stages(before, after) == [Stage.faculty, Stage.counsellor, Stage.class_advisor]


def test_nothing_unlocks_on_rejection():
    before = make_app()
    after = make_app(college_office_verified=False)
    assert rules.unlocked_stages(before, after) == []


def test_describe_is_shared_view():
    app = make_app("hostel", library_verified=True, hostel_verified=True, hostel_comment="room cleared")
    view = rules.describe(app)
    assert view.applicable_stages == 9
    assert view.verified_stages == 2
    assert view.progress_percent == rules.compute_progress(app) == 22
    hostel = next(s for s in view.stages if s.stage is Stage.hostel)
    assert hostel.label == "Hostel"
    assert hostel.comment == "room cleared"


def test_apply_returns_patched_copy():
    app = make_app()
    result = rules.evaluate(app, Role.library, Decision.approve, "no dues")
    patched = rules.apply(app, result)
    assert patched.library_verified is True
    assert patched.library_comment == "no dues"
    assert app.library_verified is None
