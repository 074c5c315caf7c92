# ===========================================================
# feedback_portal/views.py
# ===========================================================
"""Project-level endpoints: throttle-first API base view, liveness check and JSON error pages."""

from django.http import JsonResponse
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from feedback_portal.exceptions import GENERIC_SERVER_ERROR, error_payload


class PortalAPIView(APIView):
    """
    Base for every API view: rate limits are checked before authentication
    and permissions, so rejected requests still count against the caller's
    address.
    """

    def initial(self, request, *args, **kwargs):
        self.check_throttles(request)
        self.throttles_checked = True
        super().initial(request, *args, **kwargs)

    def check_throttles(self, request):
        # APIView.initial calls this again after the permission checks.
        if getattr(self, "throttles_checked", False):
            return
        super().check_throttles(request)


class HealthView(PortalAPIView):
    """
    GET /api/health
    Liveness check, no authentication.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({
            "success": True,
            "message": "Service is running.",
            "timestamp": timezone.now().isoformat(),
        })


def not_found(request, exception=None):
    return JsonResponse(error_payload("Endpoint not found."), status=404)


def server_error(request):
    return JsonResponse(error_payload(GENERIC_SERVER_ERROR), status=500)
