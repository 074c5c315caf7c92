# ===========================================================
# feedback_portal/settings_test.py
# ===========================================================
# Test overrides: fast hashing, synchronous audit writes,
# plain static storage (no collectstatic manifest).
# ===========================================================

import dataclasses

from feedback_portal.settings import *  # noqa: F401,F403
from feedback_portal.settings import PORTAL

PORTAL = dataclasses.replace(PORTAL, audit_async=False)

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "feedback-portal-tests",
    }
}
