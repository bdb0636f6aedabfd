"""
Tests for the notice board.
"""
from datetime import datetime, timedelta, timezone

from clubhq.models.enums import ContentKind

NOW = datetime.now(timezone.utc)


def post_notice(workflow, admin, approve=True, **fields):
    data = {"title": "Monthly meeting", "message": "Saturday at ten", **fields}
    doc = workflow.submit(ContentKind.NOTICE, data, admin)
    if approve:
        doc = workflow.approve(ContentKind.NOTICE, doc.id, admin)
    return doc


class TestNoticeBoard:

    def test_only_approved_notices_shown(self, client, workflow, admin_user):
        shown = post_notice(workflow, admin_user, title="Olympiad registration open")
        post_notice(workflow, admin_user, approve=False, title="Draft")

        response = client.get("/api/notices")
        assert response.status_code == 200
        assert [n["id"] for n in response.json()] == [shown.id]
        assert "created_by" not in response.json()[0]

    def test_window_filters_expired_and_future(self, workflow, admin_user):
        current = post_notice(workflow, admin_user, starts_at=(NOW - timedelta(days=1)).isoformat())
        post_notice(workflow, admin_user, ends_at=(NOW - timedelta(hours=1)).isoformat())
        post_notice(workflow, admin_user, starts_at=(NOW + timedelta(days=2)).isoformat())

        assert [doc.id for doc in workflow.active_notices(None, now=NOW)] == [current.id]

    def test_audience(self, workflow, admin_user, test_user, applicant):
        everyone = post_notice(workflow, admin_user, target_audience="all")
        members = post_notice(workflow, admin_user, target_audience="members")
        admins = post_notice(workflow, admin_user, target_audience="admins")

        assert {d.id for d in workflow.active_notices(None)} == {everyone.id}
        assert {d.id for d in workflow.active_notices(applicant)} == {everyone.id}
        assert {d.id for d in workflow.active_notices(test_user)} == {everyone.id, members.id}
        assert {d.id for d in workflow.active_notices(admin_user)} == {everyone.id, members.id, admins.id}

    def test_pinned_then_priority_order(self, workflow, admin_user):
        low = post_notice(workflow, admin_user, priority="low")
        urgent = post_notice(workflow, admin_user, priority="urgent")
        pinned_low = post_notice(workflow, admin_user, priority="low", pinned=True)
        medium = post_notice(workflow, admin_user)

        ordered = [doc.id for doc in workflow.active_notices(None)]
        assert ordered == [pinned_low.id, urgent.id, medium.id, low.id]

    def test_member_cannot_post_notice(self, client, auth_headers):
        response = client.post(
            "/api/content/notice",
            json={"title": "Free pizza", "message": "Everyone welcome"},
            headers=auth_headers,
        )
        assert response.status_code == 403

    def test_window_must_end_after_start(self, client, admin_headers):
        response = client.post(
            "/api/content/notice",
            json={
                "title": "Backwards",
                "message": "Ends before it starts",
                "starts_at": (NOW + timedelta(days=2)).isoformat(),
                "ends_at": (NOW + timedelta(days=1)).isoformat(),
            },
            headers=admin_headers,
        )
        assert response.status_code == 422
