# ===========================================================
# feedback/models.py
# ===========================================================
"""
Feedback tickets and their response trail:
- Category / priority / status enumerations
- Owner-scoped and triage-ordered queries with pagination
- Aggregate statistics
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db import models
from django.db.models import Case, Count, IntegerField, Value, When
from django.utils import timezone
import logging

from feedback_portal.exceptions import NotFound
from feedback_portal.text import sanitize_text

logger = logging.getLogger("feedback")

DEFAULT_PAGE_SIZE = 20


# ===========================================================
# Custom QuerySet and Manager
# ===========================================================
class FeedbackQuerySet(models.QuerySet):

    def for_owner(self, owner):
        return self.filter(owner=owner)

    def filter_by(self, status=None, category=None, priority=None):
        qs = self
        if status:
            qs = qs.filter(status=status)
        if category:
            qs = qs.filter(category=category)
        if priority:
            qs = qs.filter(priority=priority)
        return qs

    def with_details(self):
        return self.select_related("owner").prefetch_related("responses")

    def newest_first(self):
        return self.order_by("-created_at", "-id")

    def triage_order(self):
        """Urgent first, then high, normal, low; newest first within a priority."""
        rank = Case(
            *[When(priority=value, then=Value(i)) for i, value in enumerate(Feedback.PRIORITY_ORDER)],
            default=Value(0),
            output_field=IntegerField(),
        )
        return self.annotate(priority_rank=rank).order_by("-priority_rank", "-created_at", "-id")

    def page(self, page=1, page_size=DEFAULT_PAGE_SIZE):
        """Return ``(items, total)``; ``page`` is 1-indexed, total ignores the slice."""
        paginator = Paginator(self.with_details(), page_size)
        try:
            items = list(paginator.page(page).object_list)
        except EmptyPage:
            items = []
        return items, paginator.count


class FeedbackManager(models.Manager):

    def get_queryset(self):
        return FeedbackQuerySet(self.model, using=self._db)

    def create_ticket(self, owner, category, title, content,
                      priority=None, is_anonymous=False):
        """
        Validate, sanitize and store a new ticket in its initial state.

        Raises ``django.core.exceptions.ValidationError`` for unknown
        category/priority or blank/oversized text.
        """
        ticket = self.model(
            owner=owner,
            category=category,
            title=sanitize_text(title or ""),
            content=sanitize_text(content or ""),
            priority=priority or Feedback.PRIORITY_NORMAL,
            is_anonymous=bool(is_anonymous),
        )
        if len(ticket.content) > Feedback.CONTENT_MAX_LENGTH:
            # TextField max_length is not enforced by model validation.
            raise ValidationError({"content": [f"Ensure this value has at most {Feedback.CONTENT_MAX_LENGTH} characters."]})
        ticket.full_clean(exclude=["owner"])
        ticket.save(force_insert=True)
        logger.info(f"[Feedback] Created #{ticket.pk} ({ticket.category}/{ticket.priority}) by {owner.student_id}")
        return ticket

    def owned_by(self, owner, status=None, category=None):
        """A student's own tickets, newest first."""
        return (
            self.get_queryset()
            .for_owner(owner)
            .filter_by(status=status, category=category)
            .newest_first()
        )

    def triage_queue(self, status=None, category=None, priority=None):
        """Every ticket in triage order."""
        return (
            self.get_queryset()
            .filter_by(status=status, category=category, priority=priority)
            .triage_order()
        )

    def list_by_owner(self, owner, status=None, category=None,
                      page=1, page_size=DEFAULT_PAGE_SIZE):
        return self.owned_by(owner, status, category).page(page, page_size)

    def list_all(self, status=None, category=None, priority=None,
                 page=1, page_size=DEFAULT_PAGE_SIZE):
        return self.triage_queue(status, category, priority).page(page, page_size)

    def get_by_id(self, pk):
        try:
            return self.get_queryset().with_details().get(pk=pk)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise NotFound("Feedback not found.")

    def aggregate_stats(self):
        """Totals by status and category; every known key is present."""
        qs = self.get_queryset()
        by_status = {value: 0 for value, _ in Feedback.STATUS_CHOICES}
        by_category = {value: 0 for value, _ in Feedback.CATEGORY_CHOICES}

        for row in qs.order_by().values("status").annotate(count=Count("id")):
            by_status[row["status"]] = row["count"]
        for row in qs.order_by().values("category").annotate(count=Count("id")):
            by_category[row["category"]] = row["count"]

        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_category": by_category,
        }


# ===========================================================
# Feedback (ticket)
# ===========================================================
class Feedback(models.Model):
    """
    A student's complaint or request.

    Students set category, text, priority and anonymity at creation and
    never touch the ticket again; administrators change ``status`` and
    append responses through ``feedback.lifecycle.TicketLifecycle``.
    Tickets are never deleted.
    """

    CATEGORY_ACADEMIC = "academic"
    CATEGORY_ACCOMMODATION = "accommodation"
    CATEGORY_CATERING = "catering"
    CATEGORY_FINANCIAL = "financial"
    CATEGORY_SAFETY = "safety"
    CATEGORY_OTHER = "other"

    CATEGORY_CHOICES = [
        (CATEGORY_ACADEMIC, "Academic"),
        (CATEGORY_ACCOMMODATION, "Accommodation"),
        (CATEGORY_CATERING, "Catering"),
        (CATEGORY_FINANCIAL, "Financial"),
        (CATEGORY_SAFETY, "Safety"),
        (CATEGORY_OTHER, "Other"),
    ]

    PRIORITY_LOW = "low"
    PRIORITY_NORMAL = "normal"
    PRIORITY_HIGH = "high"
    PRIORITY_URGENT = "urgent"

    PRIORITY_CHOICES = [
        (PRIORITY_LOW, "Low"),
        (PRIORITY_NORMAL, "Normal"),
        (PRIORITY_HIGH, "High"),
        (PRIORITY_URGENT, "Urgent"),
    ]
    # Ascending rank used by triage ordering.
    PRIORITY_ORDER = [PRIORITY_LOW, PRIORITY_NORMAL, PRIORITY_HIGH, PRIORITY_URGENT]

    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_RESOLVED = "resolved"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_RESOLVED, "Resolved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    TITLE_MAX_LENGTH = 100
    CONTENT_MAX_LENGTH = 2000

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="feedbacks",
        help_text="Submitting account; never changes.",
    )
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    title = models.CharField(max_length=TITLE_MAX_LENGTH)
    content = models.TextField(max_length=CONTENT_MAX_LENGTH)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_NORMAL)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    is_anonymous = models.BooleanField(
        default=False,
        help_text="Hide the owner's identity from everyone but the owner.",
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FeedbackManager()

    class Meta:
        verbose_name = "Feedback"
        verbose_name_plural = "Feedback"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "-created_at"], name="feedback_owner_created_idx"),
            models.Index(fields=["category", "status"], name="feedback_category_status_idx"),
            models.Index(fields=["status", "priority"], name="feedback_status_priority_idx"),
        ]

    def __str__(self):
        return f"#{self.pk} [{self.status}] {self.title}"


# ===========================================================
# Response trail
# ===========================================================
class FeedbackResponse(models.Model):
    """
    One administrator reply. Append-only: rows refuse updates once saved.

    ``admin_name`` is a snapshot taken when the reply was written, so later
    account renames do not rewrite history.
    """

    feedback = models.ForeignKey(
        Feedback,
        on_delete=models.CASCADE,
        related_name="responses",
    )
    content = models.TextField(max_length=Feedback.CONTENT_MAX_LENGTH)
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="feedback_responses",
    )
    admin_name = models.CharField(max_length=50)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Feedback Response"
        verbose_name_plural = "Feedback Responses"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Response to #{self.feedback_id} by {self.admin_name}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Feedback responses are immutable once written.")
        super().save(*args, **kwargs)
