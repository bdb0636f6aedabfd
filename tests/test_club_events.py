"""
Tests for club events and event sign-ups.
"""
import pytest

from clubhq.content_store import ContentDocument
from clubhq.errors import ConflictError, NotFoundError, ValidationError
from clubhq.models.enums import ContentKind
from tests.conftest import headers_for

WORKSHOP = {
    "title": "Climate Action Workshop",
    "description": "Local action strategies",
    "event_date": "2030-05-04",
    "time": "2:00 PM - 5:00 PM",
    "location": "Club office",
    "category": "workshop",
    "max_participants": 2,
    "registration_required": True,
}

SIGN_UP = {"name": "Sam Doe", "email": "sam@example.com", "phone": "+1 555 0100"}


@pytest.fixture
def open_event(workflow, admin_user):
    doc = workflow.submit(ContentKind.EVENT, WORKSHOP, admin_user)
    return workflow.approve(ContentKind.EVENT, doc.id, admin_user)


class TestEvents:

    def test_admin_creates_event_pending(self, client, admin_headers):
        response = client.post("/api/content/event", json=WORKSHOP, headers=admin_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["state"] == "upcoming"
        assert data["event_date"] == "2030-05-04"

    def test_member_cannot_create_event(self, client, auth_headers, content_db):
        response = client.post("/api/content/event", json=WORKSHOP, headers=auth_headers)
        assert response.status_code == 403
        assert content_db.query(ContentDocument).count() == 0

    def test_invalid_category(self, client, admin_headers):
        response = client.post("/api/content/event", json={**WORKSHOP, "category": "party"}, headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["details"]["errors"][0]["field"] == "category"

    def test_approved_event_is_public(self, client, open_event):
        listed = client.get("/api/content/event").json()
        assert [item["id"] for item in listed] == [open_event.id]
        assert listed[0]["location"] == "Club office"


class TestEventRegistrations:

    def test_anonymous_sign_up(self, client, open_event):
        response = client.post("/api/content/event_registration", json={**SIGN_UP, "event_id": open_event.id})
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["event_id"] == open_event.id

    def test_sign_ups_are_not_public(self, client, open_event, admin_headers):
        created = client.post("/api/content/event_registration", json={**SIGN_UP, "event_id": open_event.id}).json()
        client.post(f"/api/content/event_registration/{created['id']}/approve", headers=admin_headers)

        assert client.get("/api/content/event_registration").status_code == 403
        assert client.get(f"/api/content/event_registration/{created['id']}").status_code == 404

    def test_duplicate_email_conflicts(self, workflow, open_event):
        workflow.submit(ContentKind.EVENT_REGISTRATION, {**SIGN_UP, "event_id": open_event.id}, None)
        with pytest.raises(ConflictError) as exc_info:
            workflow.submit(
                ContentKind.EVENT_REGISTRATION,
                {**SIGN_UP, "email": "SAM@example.com", "event_id": open_event.id},
                None,
            )
        assert exc_info.value.current_status == "pending"

    def test_member_registers_once(self, client, open_event, auth_headers):
        body = {**SIGN_UP, "event_id": open_event.id}
        assert client.post("/api/content/event_registration", json=body, headers=auth_headers).status_code == 201

        response = client.post(
            "/api/content/event_registration",
            json={**body, "email": "other@example.com"},
            headers=auth_headers,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT"

    def test_rejected_sign_up_frees_the_seat(self, workflow, open_event, admin_user):
        first = workflow.submit(ContentKind.EVENT_REGISTRATION, {**SIGN_UP, "event_id": open_event.id}, None)
        workflow.reject(ContentKind.EVENT_REGISTRATION, first.id, admin_user)
        again = workflow.submit(ContentKind.EVENT_REGISTRATION, {**SIGN_UP, "event_id": open_event.id}, None)
        assert again.status == "pending"

    def test_full_event(self, workflow, open_event):
        for n in range(2):
            workflow.submit(
                ContentKind.EVENT_REGISTRATION,
                {**SIGN_UP, "email": f"guest{n}@example.com", "event_id": open_event.id},
                None,
            )
        with pytest.raises(ConflictError) as exc_info:
            workflow.submit(
                ContentKind.EVENT_REGISTRATION,
                {**SIGN_UP, "email": "late@example.com", "event_id": open_event.id},
                None,
            )
        assert exc_info.value.message == "This event is full"

    def test_unapproved_event_not_found(self, workflow, admin_user):
        pending = workflow.submit(ContentKind.EVENT, WORKSHOP, admin_user)
        with pytest.raises(NotFoundError):
            workflow.submit(ContentKind.EVENT_REGISTRATION, {**SIGN_UP, "event_id": pending.id}, None)

    def test_event_without_registration(self, workflow, admin_user):
        doc = workflow.submit(ContentKind.EVENT, {**WORKSHOP, "registration_required": False}, admin_user)
        workflow.approve(ContentKind.EVENT, doc.id, admin_user)
        with pytest.raises(ValidationError):
            workflow.submit(ContentKind.EVENT_REGISTRATION, {**SIGN_UP, "event_id": doc.id}, None)

    def test_cancelled_event_closed(self, workflow, open_event, admin_user):
        workflow.update_own(ContentKind.EVENT, open_event.id, {"state": "cancelled"}, admin_user)
        with pytest.raises(ValidationError) as exc_info:
            workflow.submit(ContentKind.EVENT_REGISTRATION, {**SIGN_UP, "event_id": open_event.id}, None)
        assert exc_info.value.details["state"] == "cancelled"

    def test_admin_lists_sign_ups_for_event(self, client, open_event, make_user, admin_headers, auth_headers):
        other_event = client.post("/api/content/event", json=WORKSHOP, headers=admin_headers).json()
        client.post(f"/api/content/event/{other_event['id']}/approve", headers=admin_headers)

        client.post("/api/content/event_registration", json={**SIGN_UP, "event_id": open_event.id})
        client.post(
            "/api/content/event_registration",
            json={**SIGN_UP, "event_id": other_event["id"]},
            headers=headers_for(make_user()),
        )

        response = client.get(f"/api/content/event/{open_event.id}/registrations", headers=admin_headers)
        assert response.status_code == 200
        listed = response.json()
        assert [item["event_id"] for item in listed] == [open_event.id]
        assert listed[0]["email"] == "sam@example.com"

        assert client.get(
            f"/api/content/event/{open_event.id}/registrations", headers=auth_headers,
        ).status_code == 403
        assert client.get("/api/content/event/999/registrations", headers=admin_headers).status_code == 404
