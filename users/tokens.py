# ===========================================================
# users/tokens.py
# ===========================================================
"""Bearer token issuing and verification on top of SimpleJWT access tokens."""

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from feedback_portal.exceptions import Unauthenticated


class TokenIssuer:
    """
    Issues signed access tokens carrying the account id and role.

    There is no refresh token: a token lives for ``config.token_lifetime``
    and the client logs in again afterwards.
    """

    def __init__(self, config):
        self.lifetime = config.token_lifetime

    def issue(self, account):
        token = AccessToken.for_user(account)
        token.set_exp(lifetime=self.lifetime)
        token["role"] = account.role
        return str(token)

    def verify(self, raw_token):
        """Return the validated token or raise ``Unauthenticated``."""
        if isinstance(raw_token, bytes):
            raw_token = raw_token.decode("utf-8")
        try:
            return AccessToken(raw_token)
        except TokenError:
            raise Unauthenticated()
