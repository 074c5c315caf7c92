from datetime import timedelta

import pytest
from django.utils import timezone

from audit.models import AuditEntry
from feedback.models import Feedback, FeedbackResponse
from feedback.policy import ANONYMOUS_OWNER

pytestmark = pytest.mark.django_db

CREATE_URL = "/api/feedback"
MY_URL = "/api/feedback/my"
ADMIN_LIST_URL = "/api/admin/feedbacks"


def status_url(pk):
    return f"/api/admin/feedback/{pk}/status"


def ticket_payload(**overrides):
    payload = {
        "category": "catering",
        "title": "Cold lunches",
        "content": "The canteen served cold food all week.",
    }
    payload.update(overrides)
    return payload


# ===========================================================
# Submission
# ===========================================================
def test_create_round_trip(student_client, student):
    resp = student_client.post(CREATE_URL, ticket_payload(priority="high"), format="json")
    assert resp.status_code == 201
    created = resp.json()["feedback"]

    detail = student_client.get(f"/api/feedback/{created['id']}")
    assert detail.status_code == 200
    ticket = detail.json()["feedback"]
    assert ticket["status"] == Feedback.STATUS_PENDING
    assert ticket["priority"] == Feedback.PRIORITY_HIGH
    assert ticket["resolved_at"] is None
    assert ticket["responses"] == []
    assert ticket["owner"]["student_id"] == student.student_id

    entry = AuditEntry.objects.get(action=AuditEntry.ACTION_CREATE)
    assert entry.actor_id == student.pk
    assert entry.resource_id == str(created["id"])


def test_create_defaults_priority_to_normal(student_client):
    resp = student_client.post(CREATE_URL, ticket_payload(), format="json")
    assert resp.json()["feedback"]["priority"] == Feedback.PRIORITY_NORMAL


def test_create_strips_markup(student_client):
    resp = student_client.post(
        CREATE_URL,
        ticket_payload(title="<script>x</script>Hello", content="  <b>Broken</b> heater  "),
        format="json",
    )
    assert resp.status_code == 201
    ticket = Feedback.objects.get(pk=resp.json()["feedback"]["id"])
    assert ticket.title == "Hello"
    assert ticket.content == "Broken heater"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"category": "parking"}, "category"),
        ({"priority": "critical"}, "priority"),
        ({"title": "<p>  </p>"}, "title"),
        ({"title": "x" * 101}, "title"),
        ({"content": "y" * 2001}, "content"),
    ],
)
def test_create_rejects_invalid_input(student_client, overrides, field):
    resp = student_client.post(CREATE_URL, ticket_payload(**overrides), format="json")
    assert resp.status_code == 400
    assert field in resp.json()["errors"]
    assert Feedback.objects.count() == 0


def test_create_requires_authentication(api_client):
    assert api_client.post(CREATE_URL, ticket_payload(), format="json").status_code == 401


def test_admin_cannot_submit_tickets(admin_client):
    resp = admin_client.post(CREATE_URL, ticket_payload(), format="json")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Only students can submit feedback."


# ===========================================================
# Reading
# ===========================================================
def test_my_list_shows_only_own_tickets(student_client, make_ticket, other_student):
    mine = make_ticket()
    make_ticket(owner=other_student)

    resp = student_client.get(MY_URL)
    assert resp.status_code == 200
    data = resp.json()
    assert [t["id"] for t in data["feedbacks"]] == [mine.pk]
    assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}


def test_my_list_filters_by_status_and_category(student_client, make_ticket):
    make_ticket(category=Feedback.CATEGORY_SAFETY)
    target = make_ticket(category=Feedback.CATEGORY_FINANCIAL)
    Feedback.objects.filter(pk=target.pk).update(status=Feedback.STATUS_PROCESSING)

    resp = student_client.get(MY_URL, {"status": "processing", "category": "financial"})
    assert [t["id"] for t in resp.json()["feedbacks"]] == [target.pk]


def test_other_student_cannot_read_ticket(other_client, make_ticket):
    ticket = make_ticket()
    resp = other_client.get(f"/api/feedback/{ticket.pk}")
    assert resp.status_code == 403
    assert resp.json()["message"] == "You can only view your own feedback."


def test_missing_ticket_is_404(student_client):
    resp = student_client.get("/api/feedback/999999")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Feedback not found."}


def test_anonymous_owner_hidden_from_admin_not_owner(student_client, admin_client, make_ticket, student):
    ticket = make_ticket(is_anonymous=True)

    listed = admin_client.get(ADMIN_LIST_URL).json()["feedbacks"][0]
    assert listed["owner"] == ANONYMOUS_OWNER

    admin_detail = admin_client.get(f"/api/feedback/{ticket.pk}").json()["feedback"]
    assert admin_detail["owner"] == ANONYMOUS_OWNER

    own_detail = student_client.get(f"/api/feedback/{ticket.pk}").json()["feedback"]
    assert own_detail["owner"]["student_id"] == student.student_id

    ticket.refresh_from_db()
    assert ticket.owner_id == student.pk


def test_pagination_covers_every_ticket_once(admin_client, make_ticket):
    for i in range(45):
        make_ticket(title=f"Ticket {i}")

    seen = []
    sizes = []
    for page in (1, 2, 3):
        data = admin_client.get(ADMIN_LIST_URL, {"page": page}).json()
        assert data["pagination"]["total"] == 45
        assert data["pagination"]["pages"] == 3
        sizes.append(len(data["feedbacks"]))
        seen.extend(t["id"] for t in data["feedbacks"])

    assert sizes == [20, 20, 5]


def test_limit_sets_page_size(admin_client, make_ticket):
    for i in range(5):
        make_ticket(title=f"Ticket {i}")

    data = admin_client.get(ADMIN_LIST_URL, {"page": 2, "limit": 2}).json()
    assert len(data["feedbacks"]) == 2
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}


def test_page_past_the_end_is_empty_with_totals(student_client, make_ticket):
    make_ticket()
    data = student_client.get(MY_URL, {"page": 4}).json()
    assert data["feedbacks"] == []
    assert data["pagination"] == {"page": 4, "limit": 20, "total": 1, "pages": 1}


def test_empty_list_reports_no_pages(student_client):
    data = student_client.get(MY_URL).json()
    assert data["feedbacks"] == []
    assert data["pagination"] == {"page": 1, "limit": 20, "total": 0, "pages": 0}
    assert len(set(seen)) == 45


def test_page_size_is_capped(admin_client):
    resp = admin_client.get(ADMIN_LIST_URL, {"limit": 101})
    assert resp.status_code == 400
    assert "limit" in resp.json()["errors"]


def test_admin_list_orders_by_priority_then_newest(admin_client, make_ticket):
    low = make_ticket(priority=Feedback.PRIORITY_LOW)
    urgent = make_ticket(priority=Feedback.PRIORITY_URGENT)
    normal_old = make_ticket()
    normal_new = make_ticket()
    high = make_ticket(priority=Feedback.PRIORITY_HIGH)
    Feedback.objects.filter(pk=normal_old.pk).update(created_at=timezone.now() - timedelta(days=1))

    ids = [t["id"] for t in admin_client.get(ADMIN_LIST_URL).json()["feedbacks"]]
    assert ids == [urgent.pk, high.pk, normal_new.pk, normal_old.pk, low.pk]


def test_admin_list_filters_by_priority(admin_client, make_ticket):
    make_ticket()
    urgent = make_ticket(priority=Feedback.PRIORITY_URGENT)
    ids = [t["id"] for t in admin_client.get(ADMIN_LIST_URL, {"priority": "urgent"}).json()["feedbacks"]]
    assert ids == [urgent.pk]


def test_student_cannot_list_all(student_client):
    assert student_client.get(ADMIN_LIST_URL).status_code == 403


# ===========================================================
# Status updates
# ===========================================================
def test_status_update_appends_response(admin_client, admin_account, make_ticket):
    ticket = make_ticket()
    resp = admin_client.patch(
        status_url(ticket.pk),
        {"status": "processing", "response": "<i>Looking into it</i>"},
        format="json",
    )
    assert resp.status_code == 200
    data = resp.json()["feedback"]
    assert data["status"] == Feedback.STATUS_PROCESSING
    assert data["resolved_at"] is None
    assert len(data["responses"]) == 1
    assert data["responses"][0]["content"] == "Looking into it"
    assert data["responses"][0]["admin_name"] == admin_account.name
    assert data["responses"][0]["admin_id"] == admin_account.pk

    entry = AuditEntry.objects.get(action=AuditEntry.ACTION_UPDATE_STATUS)
    assert entry.details == {"status": "processing"}
    assert entry.actor_id == admin_account.pk


def test_status_update_without_response_adds_nothing(admin_client, make_ticket):
    ticket = make_ticket()
    admin_client.patch(status_url(ticket.pk), {"status": "rejected", "response": "   "}, format="json")
    assert FeedbackResponse.objects.count() == 0
    ticket.refresh_from_db()
    assert ticket.status == Feedback.STATUS_REJECTED


def test_status_update_response_is_redacted(admin_client, make_ticket):
    ticket = make_ticket(is_anonymous=True)
    resp = admin_client.patch(status_url(ticket.pk), {"status": "processing"}, format="json")
    assert resp.json()["feedback"]["owner"] == ANONYMOUS_OWNER


def test_resolved_at_is_overwritten_on_reresolution(admin_client, make_ticket):
    ticket = make_ticket()
    admin_client.patch(status_url(ticket.pk), {"status": "resolved"}, format="json")
    earlier = timezone.now() - timedelta(days=3)
    Feedback.objects.filter(pk=ticket.pk).update(resolved_at=earlier)

    admin_client.patch(status_url(ticket.pk), {"status": "processing"}, format="json")
    ticket.refresh_from_db()
    assert ticket.resolved_at == earlier

    admin_client.patch(status_url(ticket.pk), {"status": "resolved"}, format="json")
    ticket.refresh_from_db()
    assert ticket.status == Feedback.STATUS_RESOLVED
    assert ticket.resolved_at > earlier


def test_student_cannot_change_status_of_own_ticket(student_client, make_ticket):
    ticket = make_ticket()
    resp = student_client.patch(status_url(ticket.pk), {"status": "resolved"}, format="json")
    assert resp.status_code == 403
    ticket.refresh_from_db()
    assert ticket.status == Feedback.STATUS_PENDING


def test_status_update_rejects_unknown_status(admin_client, make_ticket):
    ticket = make_ticket()
    resp = admin_client.patch(status_url(ticket.pk), {"status": "closed"}, format="json")
    assert resp.status_code == 400
    assert "status" in resp.json()["errors"]


def test_status_update_on_missing_ticket(admin_client):
    resp = admin_client.patch(status_url(424242), {"status": "processing"}, format="json")
    assert resp.status_code == 404


# ===========================================================
# Statistics
# ===========================================================
def test_stats_count_every_status_and_category(admin_client, make_ticket):
    make_ticket()
    make_ticket(category=Feedback.CATEGORY_SAFETY)
    resolved = make_ticket(category=Feedback.CATEGORY_SAFETY)
    admin_client.patch(status_url(resolved.pk), {"status": "resolved"}, format="json")

    stats = admin_client.get("/api/admin/stats").json()["stats"]
    assert stats["total"] == 3
    assert stats["by_status"] == {"pending": 2, "processing": 0, "resolved": 1, "rejected": 0}
    assert stats["by_category"]["safety"] == 2
    assert stats["by_category"]["academic"] == 1
    assert stats["by_category"]["other"] == 0


def test_stats_refresh_after_new_ticket(admin_client, make_ticket):
    assert admin_client.get("/api/admin/stats").json()["stats"]["total"] == 0
    make_ticket()
    assert admin_client.get("/api/admin/stats").json()["stats"]["total"] == 1


def test_student_cannot_view_stats(student_client):
    assert student_client.get("/api/admin/stats").status_code == 403


def test_denied_requests_count_against_api_limit(student_client):
    for _ in range(100):
        assert student_client.get("/api/admin/stats").status_code == 403
    resp = student_client.get("/api/admin/stats")
    assert resp.status_code == 429
    assert resp.json()["message"] == "Too many requests, please try again later."
