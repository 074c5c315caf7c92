# ===========================================================
# feedback/signals.py
# ===========================================================
"""
Keeps the cached administrator statistics in step with ticket writes.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from .models import Feedback
from .views import clear_stats_cache

logger = logging.getLogger("feedback")


@receiver(post_save, sender=Feedback)
def feedback_saved_handler(sender, instance, created, **kwargs):
    clear_stats_cache()
    if not created:
        logger.debug(f"[Feedback] Updated #{instance.pk} ({instance.status})")
