# ===============================================
# audit/signals.py
# ===============================================
"""
The audit sink.

``audit_event`` is a one-way message: senders use ``send_robust`` so a
failing receiver is reported back as a return value instead of raised.
"""

from django.db import transaction
from django.dispatch import Signal, receiver
import logging

from .models import AuditEntry

logger = logging.getLogger("audit")

# Args: event (audit.recorder.AuditEvent)
audit_event = Signal()


@receiver(audit_event)
def write_audit_entry(sender, event, **kwargs):
    """Persist one audit event inside its own savepoint."""
    with transaction.atomic():
        entry = AuditEntry.objects.create(
            actor_id=event.actor_id,
            action=event.action,
            resource_type=event.resource_type,
            resource_id=event.resource_id,
            details=event.details,
            ip_address=event.ip_address,
            user_agent=event.user_agent,
        )
    logger.debug(f"[Audit] {entry}")
    return entry
