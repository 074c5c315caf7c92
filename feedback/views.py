# ===========================================================
# feedback/views.py
# ===========================================================
"""
Feedback API views:
- Student submission and own-ticket listing
- Ticket detail (owner or administrator)
- Administrator triage listing, status updates and statistics
"""

from django.apps import apps
from django.core.cache import cache
from django.core.paginator import EmptyPage
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
import logging

from audit.recorder import RequestMeta
from feedback_portal.views import PortalAPIView
from .models import DEFAULT_PAGE_SIZE, Feedback
from .permissions import PolicyPermission
from .policy import (
    CREATE_TICKET,
    LIST_ALL,
    LIST_OWN,
    READ_TICKET,
    UPDATE_STATUS,
    VIEW_STATS,
)
from .serializers import (
    FeedbackCreateSerializer,
    FeedbackListQuerySerializer,
    FeedbackSerializer,
    FeedbackStatsSerializer,
    MAX_PAGE_SIZE,
    StatusUpdateSerializer,
)

logger = logging.getLogger("feedback")

STATS_CACHE_KEY = "feedback_stats"
STATS_CACHE_TIMEOUT = 60


# ===========================================================
# Helper Functions
# ===========================================================
def get_lifecycle():
    return apps.get_app_config("feedback").lifecycle


def clear_stats_cache():
    cache.delete(STATS_CACHE_KEY)


class FeedbackPagination(PageNumberPagination):
    """
    ``?page=&limit=`` pagination with the ``feedbacks`` / ``pagination``
    envelope. A page past the end is empty but still reports the totals.
    """
    page_size = DEFAULT_PAGE_SIZE
    page_size_query_param = "limit"
    max_page_size = MAX_PAGE_SIZE

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.paginator = self.django_paginator_class(queryset, self.get_page_size(request))
        self.number = int(request.query_params.get(self.page_query_param) or 1)
        try:
            self.page = self.paginator.page(self.number)
        except EmptyPage:
            self.page = None
            return []
        return list(self.page)

    def get_paginated_response(self, data):
        total = self.paginator.count
        return Response({
            "success": True,
            "feedbacks": data,
            "pagination": {
                "page": self.number,
                "limit": self.paginator.per_page,
                "total": total,
                "pages": self.paginator.num_pages if total else 0,
            },
        })


class PolicyAPIView(PortalAPIView):
    """Base view: subclasses name the ``policy_action`` they perform."""
    permission_classes = [PolicyPermission]
    policy_action = None

    def paginated(self, request, queryset):
        pagination = FeedbackPagination()
        items = pagination.paginate_queryset(queryset.with_details(), request, view=self)
        data = FeedbackSerializer(items, many=True, context={"reader": request.user}).data
        return pagination.get_paginated_response(data)


# ===========================================================
# 1. SUBMIT FEEDBACK
# ===========================================================
class FeedbackCreateView(PolicyAPIView):
    """POST /api/feedback"""
    policy_action = CREATE_TICKET

    def post(self, request):
        serializer = FeedbackCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ticket = get_lifecycle().submit(
            request.user,
            meta=RequestMeta.from_request(request),
            **serializer.validated_data,
        )
        ticket = Feedback.objects.get_by_id(ticket.pk)
        return Response(
            {
                "success": True,
                "message": "Feedback submitted successfully.",
                "feedback": FeedbackSerializer(ticket, context={"reader": request.user}).data,
            },
            status=status.HTTP_201_CREATED,
        )


# ===========================================================
# 2. MY FEEDBACK
# ===========================================================
class MyFeedbackListView(PolicyAPIView):
    """GET /api/feedback/my?status=&category=&page=&limit="""
    policy_action = LIST_OWN

    def get(self, request):
        query = FeedbackListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        tickets = Feedback.objects.owned_by(
            request.user,
            status=params["status"],
            category=params["category"],
        )
        return self.paginated(request, tickets)


# ===========================================================
# 3. FEEDBACK DETAIL
# ===========================================================
class FeedbackDetailView(PolicyAPIView):
    """
    GET /api/feedback/<id>

    Anonymous tickets show the placeholder owner to every reader except the
    owner, administrators included. The detail, listing and status-update
    routes all serialize through ``redact_owner``, so no read path leaks the
    submitter of an anonymous ticket.
    """
    policy_action = READ_TICKET

    def get(self, request, pk):
        ticket = Feedback.objects.get_by_id(pk)
        self.check_object_permissions(request, ticket)
        return Response({
            "success": True,
            "feedback": FeedbackSerializer(ticket, context={"reader": request.user}).data,
        })


# ===========================================================
# 4. ADMIN: ALL FEEDBACK
# ===========================================================
class AdminFeedbackListView(PolicyAPIView):
    """GET /api/admin/feedbacks?status=&category=&priority=&page=&limit="""
    policy_action = LIST_ALL

    def get(self, request):
        query = FeedbackListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        tickets = Feedback.objects.triage_queue(
            status=params["status"],
            category=params["category"],
            priority=params["priority"],
        )
        return self.paginated(request, tickets)


# ===========================================================
# 5. ADMIN: STATUS UPDATE
# ===========================================================
class AdminStatusUpdateView(PolicyAPIView):
    """
    PATCH /api/admin/feedback/<id>/status  {status, response?}

    The returned ticket is redacted for the acting administrator like any
    other read; only the creation audit entry records the real owner.
    """
    policy_action = UPDATE_STATUS

    def patch(self, request, pk):
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ticket = get_lifecycle().apply_status_update(
            pk,
            serializer.validated_data["status"],
            serializer.validated_data.get("response"),
            request.user,
            meta=RequestMeta.from_request(request),
        )
        return Response({
            "success": True,
            "message": "Feedback status updated.",
            "feedback": FeedbackSerializer(ticket, context={"reader": request.user}).data,
        })


# ===========================================================
# 6. ADMIN: STATISTICS
# ===========================================================
class AdminStatsView(PolicyAPIView):
    """GET /api/admin/stats (cached, cleared on every ticket write)"""
    policy_action = VIEW_STATS

    def get(self, request):
        stats = cache.get(STATS_CACHE_KEY)
        if stats is None:
            stats = FeedbackStatsSerializer(Feedback.objects.aggregate_stats()).data
            cache.set(STATS_CACHE_KEY, stats, STATS_CACHE_TIMEOUT)
        return Response({"success": True, "stats": stats})
