from types import SimpleNamespace

import pytest

from feedback import policy
from feedback.policy import ANONYMOUS_OWNER, authorize, redact_owner


@pytest.mark.parametrize(
    "action",
    [policy.CREATE_TICKET, policy.LIST_OWN],
)
def test_student_allowed_actions(action):
    assert authorize("student", action, actor_id=1)


@pytest.mark.parametrize(
    "action",
    [policy.LIST_ALL, policy.UPDATE_STATUS, policy.VIEW_STATS],
)
def test_student_denied_admin_actions(action):
    decision = authorize("student", action, actor_id=1)
    assert not decision
    assert decision.reason == "Administrator access required."


def test_student_reads_only_own_ticket():
    assert authorize("student", policy.READ_TICKET, resource_owner_id=7, actor_id=7)
    assert not authorize("student", policy.READ_TICKET, resource_owner_id=8, actor_id=7)
    assert not authorize("student", policy.READ_TICKET, resource_owner_id=None, actor_id=7)


@pytest.mark.parametrize("role", ["admin", "superadmin"])
@pytest.mark.parametrize(
    "action",
    [policy.LIST_OWN, policy.LIST_ALL, policy.UPDATE_STATUS, policy.VIEW_STATS],
)
def test_admin_roles_allowed(role, action):
    assert authorize(role, action)


@pytest.mark.parametrize("role", ["admin", "superadmin"])
def test_admin_reads_any_ticket_but_cannot_create(role):
    assert authorize(role, policy.READ_TICKET, resource_owner_id=3, actor_id=99)
    assert not authorize(role, policy.CREATE_TICKET)


def test_unknown_role_is_denied():
    decision = authorize("janitor", policy.LIST_OWN)
    assert decision.allowed is False
    assert decision.reason == "Unknown role."


def make_ticket(owner_id, is_anonymous):
    owner = SimpleNamespace(pk=owner_id, student_id="20240001", name="Ada")
    return SimpleNamespace(owner=owner, owner_id=owner_id, is_anonymous=is_anonymous)


def test_redaction_hides_anonymous_owner_from_others():
    ticket = make_ticket(1, True)
    assert redact_owner(ticket, SimpleNamespace(pk=2)) == ANONYMOUS_OWNER
    assert redact_owner(ticket, None) == ANONYMOUS_OWNER


def test_redaction_keeps_owner_for_owner_and_named_tickets():
    expected = {"id": 1, "student_id": "20240001", "name": "Ada"}
    assert redact_owner(make_ticket(1, True), SimpleNamespace(pk=1)) == expected
    assert redact_owner(make_ticket(1, False), SimpleNamespace(pk=2)) == expected


def test_redaction_returns_fresh_placeholder():
    placeholder = redact_owner(make_ticket(1, True), SimpleNamespace(pk=2))
    placeholder["name"] = "changed"
    assert ANONYMOUS_OWNER["name"] == "anonymous user"
