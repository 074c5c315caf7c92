# ===========================================================
# feedback/admin.py
# ===========================================================
"""
Read-only Django admin for feedback tickets.

Status changes go through the API so they are audited; the admin site is
for browsing.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Feedback, FeedbackResponse
from .policy import ANONYMOUS_OWNER


class FeedbackResponseInline(admin.TabularInline):
    model = FeedbackResponse
    extra = 0
    fields = ("created_at", "admin_name", "content")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):

    list_display = (
        "id",
        "priority_indicator",
        "title",
        "category",
        "status_badge",
        "owner_display",
        "created_at_display",
    )
    list_filter = ("priority", "status", "category", "is_anonymous", "created_at")
    search_fields = ("title", "content")
    ordering = ("-created_at",)
    list_per_page = 25
    inlines = [FeedbackResponseInline]

    fieldsets = (
        ("Ticket", {"fields": ("owner_display", "category", "title", "content")}),
        ("Priority & Status", {"fields": ("priority", "status", "resolved_at")}),
        ("Visibility", {"fields": ("is_anonymous",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )
    readonly_fields = (
        "owner_display",
        "category",
        "title",
        "content",
        "priority",
        "status",
        "resolved_at",
        "is_anonymous",
        "created_at",
        "updated_at",
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("owner")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def priority_indicator(self, obj):
        colors = {
            Feedback.PRIORITY_URGENT: "#dc3545",
            Feedback.PRIORITY_HIGH: "#fd7e14",
            Feedback.PRIORITY_NORMAL: "#ffc107",
            Feedback.PRIORITY_LOW: "#0dcaf0",
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.priority, "#6c757d"), obj.get_priority_display()
        )
    priority_indicator.short_description = "Priority"
    priority_indicator.admin_order_field = "priority"

    def status_badge(self, obj):
        colors = {
            Feedback.STATUS_PENDING: "#6c757d",
            Feedback.STATUS_PROCESSING: "#0d6efd",
            Feedback.STATUS_RESOLVED: "#198754",
            Feedback.STATUS_REJECTED: "#adb5bd",
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 2px 6px; border-radius: 3px; font-size: 10px;">{}</span>',
            colors.get(obj.status, "#6c757d"), obj.get_status_display()
        )
    status_badge.short_description = "Status"
    status_badge.admin_order_field = "status"

    def owner_display(self, obj):
        # Anonymous tickets stay anonymous on the admin site too.
        if obj.is_anonymous:
            return ANONYMOUS_OWNER["name"]
        return format_html("<strong>{}</strong> ({})", obj.owner.name, obj.owner.student_id)
    owner_display.short_description = "Submitted by"

    def created_at_display(self, obj):
        return obj.created_at.strftime("%Y-%m-%d %H:%M")
    created_at_display.short_description = "Created"
    created_at_display.admin_order_field = "created_at"
