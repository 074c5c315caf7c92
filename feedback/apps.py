# ===============================================
# feedback/apps.py
# ===============================================
# Builds the ticket lifecycle from the portal config
# and connects the stats cache signal handlers.
# ===============================================

from django.apps import AppConfig, apps
from django.conf import settings
from django.utils.module_loading import import_string
import logging

logger = logging.getLogger(__name__)


class FeedbackConfig(AppConfig):
    """AppConfig for student feedback tickets."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "feedback"
    verbose_name = "Student Feedback"

    lifecycle = None

    def ready(self):
        from . import signals  # noqa: F401
        from .lifecycle import TicketLifecycle

        config = settings.PORTAL
        policy_class = import_string(config.transition_policy)
        self.lifecycle = TicketLifecycle(
            transition_policy=policy_class(),
            recorder=apps.get_app_config("audit").recorder,
        )
        logger.info(f"[FeedbackConfig] lifecycle ready ({policy_class.__name__})")
