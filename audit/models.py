# ===========================================================
# audit/models.py
# ===========================================================
"""
Append-only audit trail for security-relevant actions.

Entries reference accounts and tickets by id only: no foreign keys, no
cascades, so the trail outlives whatever it describes.
"""

from django.db import models


class AuditEntry(models.Model):

    ACTION_LOGIN = "login"
    ACTION_REGISTER = "register"
    ACTION_PASSWORD_CHANGE = "password_change"
    ACTION_CREATE = "create"
    ACTION_UPDATE_STATUS = "update_status"

    ACTION_CHOICES = [
        (ACTION_LOGIN, "Login"),
        (ACTION_REGISTER, "Register"),
        (ACTION_PASSWORD_CHANGE, "Password change"),
        (ACTION_CREATE, "Create"),
        (ACTION_UPDATE_STATUS, "Update status"),
    ]

    actor_id = models.PositiveBigIntegerField(null=True, blank=True, db_index=True)
    action = models.CharField(max_length=40, choices=ACTION_CHOICES, db_index=True)
    resource_type = models.CharField(max_length=40)
    resource_id = models.CharField(max_length=64, blank=True, default="")
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Audit Entry"
        verbose_name_plural = "Audit Entries"
        indexes = [
            models.Index(fields=["resource_type", "resource_id"], name="audit_resource_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.resource_type}:{self.resource_id} by {self.actor_id or '-'}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Audit entries are write-once.")
        super().save(*args, **kwargs)
