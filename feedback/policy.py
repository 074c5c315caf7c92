# ===========================================================
# feedback/policy.py
# ===========================================================
"""
Role-based access decisions and anonymity redaction.

``authorize`` is a pure function: it sees only role strings and ids, never
requests or querysets, so every role check in the project goes through it.
"""

from dataclasses import dataclass
import logging

logger = logging.getLogger("feedback")

# Actions
CREATE_TICKET = "create_ticket"
READ_TICKET = "read_ticket"
LIST_OWN = "list_own"
LIST_ALL = "list_all"
UPDATE_STATUS = "update_status"
VIEW_STATS = "view_stats"

# Actions whose decision depends on the ticket's owner.
OBJECT_ACTIONS = frozenset({READ_TICKET})

STUDENT_ROLE = "student"
ADMIN_ROLES = frozenset({"admin", "superadmin"})

_STUDENT_ACTIONS = frozenset({CREATE_TICKET, LIST_OWN, READ_TICKET})
_ADMIN_ACTIONS = frozenset({LIST_OWN, READ_TICKET, LIST_ALL, UPDATE_STATUS, VIEW_STATS})

ANONYMOUS_OWNER = {"id": None, "student_id": "anonymous", "name": "anonymous user"}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self):
        return self.allowed


ALLOW = Decision(True)


def authorize(actor_role, action, resource_owner_id=None, actor_id=None):
    """
    Decide whether ``actor_role`` may perform ``action``.

    ``resource_owner_id`` and ``actor_id`` matter only for object actions;
    a student reading a ticket with no known owner is denied.
    """
    if actor_role in ADMIN_ROLES:
        if action in _ADMIN_ACTIONS:
            return ALLOW
        if action == CREATE_TICKET:
            return Decision(False, "Only students can submit feedback.")
        return Decision(False, "Unknown action.")

    if actor_role == STUDENT_ROLE:
        if action not in _STUDENT_ACTIONS:
            return Decision(False, "Administrator access required.")
        if action == READ_TICKET:
            if resource_owner_id is None or resource_owner_id != actor_id:
                return Decision(False, "You can only view your own feedback.")
        return ALLOW

    logger.warning(f"[Policy] Unknown role {actor_role!r} denied {action}")
    return Decision(False, "Unknown role.")


def redact_owner(ticket, reader):
    """Owner block as ``reader`` may see it; the stored owner is untouched."""
    reader_id = getattr(reader, "pk", None)
    if ticket.is_anonymous and ticket.owner_id != reader_id:
        return dict(ANONYMOUS_OWNER)

    owner = ticket.owner
    return {"id": owner.pk, "student_id": owner.student_id, "name": owner.name}
