# ===========================================================
# feedback/serializers.py
# ===========================================================
"""
Serializers for feedback tickets:
- Submission input (sanitized, length-checked after stripping)
- Listing query parameters (filters + pagination)
- Ticket representation with owner redaction
- Administrator status update input
"""

from rest_framework import serializers

from feedback_portal.text import sanitize_text
from .models import DEFAULT_PAGE_SIZE, Feedback, FeedbackResponse
from .policy import redact_owner

MAX_PAGE_SIZE = 100


def _clean_text(value, max_length, label):
    value = sanitize_text(value)
    if not value:
        raise serializers.ValidationError(f"{label} cannot be blank.")
    if len(value) > max_length:
        raise serializers.ValidationError(f"{label} must be at most {max_length} characters.")
    return value


# ===========================================================
# 1. SUBMISSION
# ===========================================================
class FeedbackCreateSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=Feedback.CATEGORY_CHOICES)
    title = serializers.CharField()
    content = serializers.CharField()
    priority = serializers.ChoiceField(
        choices=Feedback.PRIORITY_CHOICES, default=Feedback.PRIORITY_NORMAL
    )
    is_anonymous = serializers.BooleanField(default=False)

    def validate_title(self, value):
        return _clean_text(value, Feedback.TITLE_MAX_LENGTH, "Title")

    def validate_content(self, value):
        return _clean_text(value, Feedback.CONTENT_MAX_LENGTH, "Content")


# ===========================================================
# 2. LISTING QUERY
# ===========================================================
class FeedbackListQuerySerializer(serializers.Serializer):
    """Query string for the listing endpoints; blank filters mean "any"."""

    status = serializers.ChoiceField(choices=Feedback.STATUS_CHOICES, required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=Feedback.CATEGORY_CHOICES, required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=Feedback.PRIORITY_CHOICES, required=False, allow_blank=True)
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=MAX_PAGE_SIZE, default=DEFAULT_PAGE_SIZE)

    def validate(self, attrs):
        for key in ("status", "category", "priority"):
            attrs[key] = attrs.get(key) or None
        return attrs


# ===========================================================
# 3. REPRESENTATION
# ===========================================================
class FeedbackResponseSerializer(serializers.ModelSerializer):

    class Meta:
        model = FeedbackResponse
        fields = ["id", "content", "admin_id", "admin_name", "created_at"]
        read_only_fields = fields


class FeedbackSerializer(serializers.ModelSerializer):
    """
    Read-only ticket representation.

    Expects the reading account in ``context["reader"]``; anonymous tickets
    show a placeholder owner to everyone but their owner.
    """

    owner = serializers.SerializerMethodField()
    category_display = serializers.CharField(source="get_category_display", read_only=True)
    priority_display = serializers.CharField(source="get_priority_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    responses = FeedbackResponseSerializer(many=True, read_only=True)

    class Meta:
        model = Feedback
        fields = [
            "id",
            "owner",
            "category",
            "category_display",
            "title",
            "content",
            "priority",
            "priority_display",
            "status",
            "status_display",
            "is_anonymous",
            "responses",
            "resolved_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_owner(self, obj):
        return redact_owner(obj, self.context.get("reader"))


# ===========================================================
# 4. STATUS UPDATE
# ===========================================================
class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Feedback.STATUS_CHOICES)
    response = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=Feedback.CONTENT_MAX_LENGTH,
    )


# ===========================================================
# 5. STATISTICS
# ===========================================================
class FeedbackStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    by_category = serializers.DictField(child=serializers.IntegerField())
