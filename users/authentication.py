from django.apps import apps
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from feedback_portal.exceptions import Unauthenticated


class BearerTokenAuthentication(JWTAuthentication):
    """
    ``Authorization: Bearer <token>`` authentication.

    Verification goes through the portal ``TokenIssuer``; a bad signature, an
    expired token, or a missing/inactive account all surface as the same
    ``Unauthenticated`` error.
    """

    def get_validated_token(self, raw_token):
        return apps.get_app_config("users").token_issuer.verify(raw_token)

    def get_user(self, validated_token):
        try:
            return super().get_user(validated_token)
        except AuthenticationFailed:
            raise Unauthenticated()
