# tests/test_endpoints.py

import pytest
from fastapi.testclient import TestClient

from nodex.common.deps import get_actor, get_admin_workflow, get_notification_service, get_workflow
from nodex.db.store import EntityStore
from nodex.features.notifications.service import NotificationService
from nodex.features.workflow.service import WorkflowService
from nodex.main import app

from tests.fakesupabase import ADMIN, FACULTY_A, LIBRARIAN, STUDENT, SUBJECT_1, FakeSupabase, campus_tables
from tests.helpers import VERIFIERS, actor

SUBMISSION = {
    "department": "CSE",
    "semester": 5,
    "batch": "2023-27",
    "subjects": [{"subject_id": SUBJECT_1, "faculty_id": FACULTY_A}],
}


@pytest.fixture
def client():
    fake = FakeSupabase(campus_tables())
    store = EntityStore(client_factory=fake.factory, timeout=1.0)
    state = {"actor": actor(STUDENT, "student")}

    app.dependency_overrides[get_actor] = lambda: state["actor"]
    app.dependency_overrides[get_workflow] = lambda: WorkflowService(store)
    app.dependency_overrides[get_admin_workflow] = lambda: WorkflowService(store)
    app.dependency_overrides[get_notification_service] = lambda: NotificationService(store=store)
    with TestClient(app) as c:
        c.acting = state
        c.fake_db = fake
        yield c
    app.dependency_overrides.clear()


def act_as(client, who):
    client.acting["actor"] = who


def test_submit_and_verify_over_http(client):
    resp = client.post("/applications", json=SUBMISSION)
    assert resp.status_code == 201
    app_id = resp.json()["application_id"]

    act_as(client, VERIFIERS["library"])
    resp = client.post(f"/applications/{app_id}/verify", json={"decision": "approve", "comment": "no dues"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "pending"
    assert body["progress_percent"] == 13
    assert body["changed"] is True

    act_as(client, actor(STUDENT, "student"))
    resp = client.get(f"/applications/{app_id}/progress")
    assert resp.status_code == 200
    assert resp.json()["verified_stages"] == 1


def test_error_taxonomy_maps_to_status_codes(client):
    app_id = client.post("/applications", json=SUBMISSION).json()["application_id"]

    dup = client.post("/applications", json=SUBMISSION)
    assert dup.status_code == 409
    assert dup.json()["error_code"] == "DUPLICATE_APPLICATION"

    act_as(client, VERIFIERS["faculty"])
    early = client.post(f"/applications/{app_id}/verify", json={"decision": "approve"})
    assert early.status_code == 409
    assert early.json()["error_code"] == "NOT_YET_ELIGIBLE"

    act_as(client, VERIFIERS["library"])
    blank = client.post(f"/applications/{app_id}/verify", json={"decision": "reject", "comment": " "})
    assert blank.status_code == 400
    assert blank.json()["error_code"] == "VALIDATION_ERROR"

    missing = client.get("/applications/00000000-0000-4000-8000-000000000999/progress")
    assert missing.status_code == 404


def test_only_students_submit(client):
    act_as(client, VERIFIERS["library"])
    resp = client.post("/applications", json=SUBMISSION)
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "FORBIDDEN"


def test_malformed_body_is_rejected_by_fastapi(client):
    resp = client.post("/applications", json={**SUBMISSION, "semester": 12})
    assert resp.status_code == 422


def test_queue_and_bulk_delete(client):
    app_id = client.post("/applications", json=SUBMISSION).json()["application_id"]

    act_as(client, actor(LIBRARIAN, "library"))
    queue = client.get("/applications/queue").json()
    assert [p["application_id"] for p in queue] == [app_id]

    act_as(client, actor(ADMIN, "admin"))
    resp = client.post("/applications/bulk-delete", json={"batch": "2023-27", "department": "CSE"})
    assert resp.status_code == 200
    assert resp.json()["deleted_applications"] == 1
    assert resp.json()["deleted_faculty_assignments"] == 1


def test_notification_inbox(client):
    client.post("/applications", json=SUBMISSION)

    act_as(client, actor(LIBRARIAN, "library"))
    inbox = client.get("/notifications").json()
    assert inbox["unread_count"] == 1
    notice_id = inbox["notifications"][0]["id"]

    count = client.get("/notifications/unread-count").json()
    assert count == {"count": 1, "route": "/library/notifications"}

    assert client.post(f"/notifications/{notice_id}/read").status_code == 200
    assert client.get("/notifications/unread-count").json()["count"] == 0
    assert client.delete(f"/notifications/{notice_id}").status_code == 200
    assert client.delete(f"/notifications/{notice_id}").status_code == 404


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Request-Id"]
