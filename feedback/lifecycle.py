# ===========================================================
# feedback/lifecycle.py
# ===========================================================
"""
Ticket lifecycle: submission and administrator status updates.

Status transitions go through a pluggable ``TransitionPolicy``. The default
policy allows any status to follow any other, so resolved and rejected
tickets can be reopened. Updates are last-write-wins: there is no version
field and concurrent administrators simply overwrite each other's status.
"""

from django.db import DatabaseError, transaction
from django.utils import timezone
from rest_framework import serializers
import logging

from audit.models import AuditEntry
from feedback_portal.exceptions import InvalidTransition, StorageError
from feedback_portal.text import sanitize_text
from .models import Feedback, FeedbackResponse

logger = logging.getLogger("feedback")

RESOURCE_TYPE = "feedback"


# ===========================================================
# Transition policies
# ===========================================================
class TransitionPolicy:
    """Raise ``InvalidTransition`` from ``check`` to refuse a status change."""

    def check(self, current, new):
        raise NotImplementedError


class PermissiveTransitionPolicy(TransitionPolicy):

    def check(self, current, new):
        return None


class TerminalStateTransitionPolicy(TransitionPolicy):
    """Resolved and rejected tickets stay closed."""

    terminal = frozenset({Feedback.STATUS_RESOLVED, Feedback.STATUS_REJECTED})

    def check(self, current, new):
        if current in self.terminal and new != current:
            raise InvalidTransition(f"A {current} ticket cannot move to {new}.")


# ===========================================================
# Lifecycle engine
# ===========================================================
class TicketLifecycle:

    def __init__(self, transition_policy, recorder):
        self.transition_policy = transition_policy
        self.recorder = recorder

    def submit(self, owner, meta=None, **fields):
        """Create a pending ticket for ``owner`` and audit it."""
        try:
            with transaction.atomic():
                ticket = Feedback.objects.create_ticket(owner=owner, **fields)
        except DatabaseError:
            logger.exception("[Lifecycle] Failed to store ticket")
            raise StorageError()

        self.recorder.record(
            AuditEntry.ACTION_CREATE,
            RESOURCE_TYPE,
            actor_id=owner.pk,
            resource_id=ticket.pk,
            details={"category": ticket.category, "priority": ticket.priority},
            meta=meta,
        )
        return ticket

    def apply_status_update(self, ticket_id, new_status, response_text, acting_admin, meta=None):
        """
        Move ticket ``ticket_id`` to ``new_status`` and optionally append a
        response written by ``acting_admin``.

        ``resolved_at`` is stamped every time the ticket becomes resolved,
        including re-resolutions.

        The ticket is returned unredacted; callers serialize it with the
        reader in context, so an anonymous owner stays hidden from the
        administrator who made the change.
        """
        if new_status not in dict(Feedback.STATUS_CHOICES):
            raise serializers.ValidationError({"status": [f'"{new_status}" is not a valid status.']})

        content = sanitize_text(response_text or "")

        try:
            with transaction.atomic():
                ticket = Feedback.objects.get_by_id(ticket_id)
                self.transition_policy.check(ticket.status, new_status)

                now = timezone.now()
                ticket.status = new_status
                update_fields = ["status", "updated_at"]
                if new_status == Feedback.STATUS_RESOLVED:
                    ticket.resolved_at = now
                    update_fields.append("resolved_at")
                ticket.save(update_fields=update_fields)

                if content:
                    FeedbackResponse.objects.create(
                        feedback=ticket,
                        content=content,
                        admin=acting_admin,
                        admin_name=acting_admin.name,
                        created_at=now,
                    )
        except DatabaseError:
            logger.exception(f"[Lifecycle] Failed to update ticket #{ticket_id}")
            raise StorageError()

        logger.info(f"[Lifecycle] #{ticket.pk} -> {new_status} by {acting_admin.student_id}")
        self.recorder.record(
            AuditEntry.ACTION_UPDATE_STATUS,
            RESOURCE_TYPE,
            actor_id=acting_admin.pk,
            resource_id=ticket.pk,
            details={"status": new_status},
            meta=meta,
        )
        return Feedback.objects.get_by_id(ticket.pk)
