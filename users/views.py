# ===========================================================
# users/views.py
# ===========================================================

from django.apps import apps
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
import logging

from audit.recorder import RequestMeta
from feedback_portal.throttling import ApiRateThrottle, LoginRateThrottle
from feedback_portal.views import PortalAPIView
from .serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    ProfileSerializer,
    RegisterSerializer,
)

logger = logging.getLogger("users")


def get_auth_service():
    return apps.get_app_config("users").auth_service


# ===========================================================
# 1. REGISTER
# ===========================================================
class RegisterView(PortalAPIView):
    """
    POST /api/auth/register
    Creates a student account.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = get_auth_service().register(
            meta=RequestMeta.from_request(request),
            **serializer.validated_data,
        )
        return Response(
            {
                "success": True,
                "message": "Registration successful.",
                "user": ProfileSerializer(account).data,
            },
            status=status.HTTP_201_CREATED,
        )


# ===========================================================
# 2. LOGIN
# ===========================================================
class LoginView(PortalAPIView):
    """
    POST /api/auth/login
    Returns a bearer token and the public profile.
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [ApiRateThrottle, LoginRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = get_auth_service().authenticate(
            serializer.validated_data["student_id"],
            serializer.validated_data["password"],
            meta=RequestMeta.from_request(request),
        )
        return Response(
            {
                "success": True,
                "message": "Login successful.",
                "token": result.token,
                "user": ProfileSerializer(result.account).data,
            },
            status=status.HTTP_200_OK,
        )


# ===========================================================
# 3. CURRENT USER
# ===========================================================
class MeView(PortalAPIView):
    """GET /api/auth/me"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"success": True, "user": ProfileSerializer(request.user).data})


# ===========================================================
# 4. CHANGE PASSWORD
# ===========================================================
class ChangePasswordView(PortalAPIView):
    """PUT /api/auth/password"""
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        get_auth_service().change_password(
            request.user,
            serializer.validated_data["current_password"],
            serializer.validated_data["new_password"],
            meta=RequestMeta.from_request(request),
        )
        return Response({"success": True, "message": "Password changed successfully."})
