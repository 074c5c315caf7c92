# ===============================================
# audit/apps.py
# ===============================================

from django.apps import AppConfig
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


class AuditConfig(AppConfig):
    """
    AppConfig for the audit trail.

    Builds the process-wide ``AuditRecorder`` from the portal configuration;
    the users and feedback apps pick it up from here in their own ready().
    """
    default_auto_field = "django.db.models.BigAutoField"
    name = "audit"
    verbose_name = "Audit Trail"

    recorder = None

    def ready(self):
        from .recorder import AuditRecorder
        from . import signals  # noqa: F401

        self.recorder = AuditRecorder(settings.PORTAL)
        logger.info(
            "[AuditConfig] recorder ready (%s)",
            "async" if self.recorder.is_async else "inline",
        )
