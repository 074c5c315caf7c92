# ===========================================================
# users/apps.py
# ===========================================================

from django.apps import AppConfig, apps
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


class UsersConfig(AppConfig):
    """
    Django AppConfig for accounts and authentication.

    Responsibilities:
    ----------------------------------------------------------
    • Builds the ``TokenIssuer`` and ``AuthService`` from the portal config
    • Hands them the shared audit recorder
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
    verbose_name = "Accounts"

    token_issuer = None
    auth_service = None

    def ready(self):
        from .services import AuthService
        from .tokens import TokenIssuer

        config = settings.PORTAL
        self.token_issuer = TokenIssuer(config)
        self.auth_service = AuthService(
            config,
            token_issuer=self.token_issuer,
            recorder=apps.get_app_config("audit").recorder,
        )
        logger.info("[UsersConfig] auth service ready")
