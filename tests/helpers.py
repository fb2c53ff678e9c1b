"""Shared builders for workflow tests."""

from nodex.features.profiles.schemas import Role
from nodex.features.workflow.schemas import Actor, Decision
from nodex.features.workflow.service import WorkflowService

from tests.fakesupabase import (
    ADVISOR,
    COUNSELLOR,
    FACULTY_A,
    FACULTY_B,
    HOD,
    LAB,
    LIBRARIAN,
    OFFICE,
    STUDENT,
    SUBJECT_1,
    SUBJECT_2,
    WARDEN,
)


def actor(user_id: str, role: str) -> Actor:
    return Actor(user_id=user_id, role=Role(role))


# Verifier for each role on the seeded CSE campus.
VERIFIERS = {
    "library": actor(LIBRARIAN, "library"),
    "hostel": actor(WARDEN, "hostel"),
    "college_office": actor(OFFICE, "college_office"),
    "faculty": actor(FACULTY_A, "faculty"),
    "counsellor": actor(COUNSELLOR, "counsellor"),
    "class_advisor": actor(ADVISOR, "class_advisor"),
    "hod": actor(HOD, "hod"),
    "lab_instructor": actor(LAB, "lab_instructor"),
}

# Everything before payment, in a valid order.
PRE_PAYMENT = ("library", "college_office", "faculty", "counsellor", "class_advisor", "hod")


async def submit(workflow: WorkflowService, student_id: str = STUDENT, *, two_faculty: bool = False) -> str:
    subjects = [{"subject_id": SUBJECT_1, "faculty_id": FACULTY_A}]
    if two_faculty:
        subjects.append({"subject_id": SUBJECT_2, "faculty_id": FACULTY_B})
    outcome = await workflow.submit_application(student_id, "CSE", 5, "2023-27", subjects)
    return outcome.application_id


async def approve(workflow: WorkflowService, application_id: str, *roles: str):
    outcome = None
    for role in roles:
        outcome = await workflow.verify(application_id, VERIFIERS[role], Decision.approve)
    return outcome


async def pay(workflow: WorkflowService, application_id: str, student_id: str = STUDENT):
    return await workflow.submit_payment(application_id, "TXN-42", "Asha Rao", actor(student_id, "student"))
