# ===============================================
# users/admin.py
# ===============================================
# Django Admin configuration for portal accounts.
# Features:
# - Color-coded roles (Student / Admin / Super Admin)
# - Lockout status with remaining lock time
# - Unlock / deactivate / reactivate actions (accounts are never deleted)
# ===============================================

from django.contrib import admin, messages
from django.db import transaction
from django.utils import timezone
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import Account


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):

    list_display = (
        "student_id",
        "name",
        "email",
        "colored_role",
        "is_active",
        "login_attempts",
        "lock_expiry_time",
        "last_login",
        "created_at",
    )
    list_filter = ("role", "is_active", "created_at")
    search_fields = ("student_id", "name", "email", "phone")
    ordering = ("student_id",)
    list_per_page = 25

    readonly_fields = (
        "student_id",
        "login_attempts",
        "lock_until",
        "last_login",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        (_("Identity"), {"fields": ("student_id", "name", "email", "phone")}),
        (_("Role & Access"), {"fields": ("role", "is_active")}),
        (
            _("Security Status"),
            {
                "fields": ("login_attempts", "lock_until"),
                "description": "Failed login counter and lock expiry.",
            },
        ),
        (_("System Info"), {"fields": ("last_login", "created_at", "updated_at")}),
    )

    actions = ["unlock_selected_accounts", "deactivate_selected_accounts", "reactivate_selected_accounts"]

    # ------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------
    def colored_role(self, obj):
        color_map = {
            Account.ROLE_SUPERADMIN: "#dc3545",
            Account.ROLE_ADMIN: "#28a745",
            Account.ROLE_STUDENT: "#007bff",
        }
        color = color_map.get(obj.role, "#6c757d")
        return format_html(
            '<span style="font-weight:bold;color:{};padding:3px 8px;'
            'background-color:{}20;border-radius:3px;">{}</span>',
            color, color, obj.get_role_display()
        )

    colored_role.short_description = "Role"
    colored_role.admin_order_field = "role"

    def lock_expiry_time(self, obj):
        if not obj.is_locked():
            return "-"
        remaining = obj.lock_until - timezone.now()
        mins = int(remaining.total_seconds() // 60)
        return format_html('<span style="color:#dc3545;font-weight:bold;">{}m</span>', mins)

    lock_expiry_time.short_description = "Locked For"

    # ------------------------------------------------------
    # Admin actions
    # ------------------------------------------------------
    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        # Accounts are created through registration or the ensure_superadmin command.
        return False

    @transaction.atomic
    def unlock_selected_accounts(self, request, queryset):
        count = queryset.filter(lock_until__isnull=False).update(
            login_attempts=0, lock_until=None, updated_at=timezone.now()
        )
        self.message_user(request, f"{count} account(s) unlocked.", level=messages.SUCCESS)

    unlock_selected_accounts.short_description = "Unlock selected accounts"

    @transaction.atomic
    def deactivate_selected_accounts(self, request, queryset):
        count = queryset.exclude(pk=request.user.pk).update(is_active=False, updated_at=timezone.now())
        self.message_user(request, f"{count} account(s) deactivated.", level=messages.WARNING)

    deactivate_selected_accounts.short_description = "Deactivate selected accounts"

    @transaction.atomic
    def reactivate_selected_accounts(self, request, queryset):
        count = queryset.update(is_active=True, updated_at=timezone.now())
        self.message_user(request, f"{count} account(s) reactivated.", level=messages.SUCCESS)

    reactivate_selected_accounts.short_description = "Reactivate selected accounts"
