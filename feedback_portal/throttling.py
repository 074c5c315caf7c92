# ===========================================================
# feedback_portal/throttling.py
# ===========================================================
"""
Client-address rate limits enforced before any view logic runs.

DRF's ``SimpleRateThrottle`` only understands ``<n>/<unit>``; the portal
windows are multi-unit (100 requests per 15 minutes), so ``parse_rate``
also accepts a count in front of the unit, e.g. ``100/15m``.
"""

import re

from rest_framework.throttling import SimpleRateThrottle

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_WINDOW_RE = re.compile(r"^(?P<count>\d*)(?P<unit>[smhd])")


class AddressRateThrottle(SimpleRateThrottle):
    """Fixed-window counter keyed by the client address (authenticated or not)."""

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        num, period = rate.split("/")
        match = _WINDOW_RE.match(period.strip().lower())
        if not match:
            raise ValueError(f"Invalid throttle window: {rate!r}")
        multiplier = int(match.group("count") or 1)
        return (int(num), multiplier * _UNIT_SECONDS[match.group("unit")])

    def get_cache_key(self, request, view):
        return self.cache_format % {
            "scope": self.scope,
            "ident": self.get_ident(request),
        }


class ApiRateThrottle(AddressRateThrottle):
    """General API traffic: applied to every endpoint."""
    scope = "api"


class LoginRateThrottle(AddressRateThrottle):
    """Authentication attempts, independent of the per-account lockout."""
    scope = "login"
