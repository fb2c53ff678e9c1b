"""Role keyed lookup tables for notification routing."""

from typing import Dict

from nodex.features.profiles.schemas import Role

NOTIFICATION_ROUTES: Dict[Role, str] = {
    Role.admin: "/admin/notifications",
    Role.student: "/student/notifications",
    Role.library: "/library/notifications",
    Role.hostel: "/hostel/notifications",
    Role.college_office: "/college-office/notifications",
    Role.faculty: "/faculty/notifications",
    Role.counsellor: "/counsellor/notifications",
    Role.class_advisor: "/class-advisor/notifications",
    Role.hod: "/hod/notifications",
    Role.lab_instructor: "/lab-instructor/notifications",
}

# Title of the notice a verifier receives when an application reaches their stage.
VERIFIER_NOTICES: Dict[Role, str] = {
    Role.library: "New No Due Application",
    Role.hostel: "Ready for Hostel Verification",
    Role.college_office: "Ready for College Office Verification",
    Role.faculty: "Ready for Faculty Verification",
    Role.counsellor: "Ready for Counsellor Verification",
    Role.class_advisor: "Ready for Class Advisor Verification",
    Role.hod: "Ready for HOD Verification",
    Role.lab_instructor: "New Payment Verification Request",
}


def notifications_route(role: Role) -> str:
    return NOTIFICATION_ROUTES.get(role, NOTIFICATION_ROUTES[Role.admin])
