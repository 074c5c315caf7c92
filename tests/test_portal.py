from datetime import timedelta
from pathlib import Path
import logging
import os
import subprocess
import sys

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from feedback_portal.config import PortalConfig
from feedback_portal.text import sanitize_text
from feedback_portal.throttling import ApiRateThrottle
from users.models import Account

PROJECT_ROOT = Path(__file__).resolve().parent.parent


# ===========================================================
# Startup
# ===========================================================
def test_wsgi_application_starts_in_a_fresh_interpreter():
    # The test process is already set up; a clean interpreter replays the real import order.
    env = dict(os.environ, DJANGO_SETTINGS_MODULE="feedback_portal.settings_test")
    result = subprocess.run(
        [sys.executable, "-c", "import feedback_portal.wsgi, feedback_portal.urls"],
        cwd=PROJECT_ROOT,
        env=env,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr


# ===========================================================
# Logging
# ===========================================================
@pytest.mark.parametrize("name", ["users", "feedback", "audit", "feedback_portal"])
def test_app_loggers_are_configured(name):
    logger = logging.getLogger(name)
    assert logger.level != logging.NOTSET
    assert logger.propagate


# ===========================================================
# Text sanitizing
# ===========================================================
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("<script>x</script>Hello", "Hello"),
        ("<STYLE type='text/css'>p{}</STYLE> styled ", "styled"),
        ("  <b>bold</b> and <i>italic</i> ", "bold and italic"),
        ("plain", "plain"),
        ("<p></p>", ""),
    ],
)
def test_sanitize_text(raw, expected):
    assert sanitize_text(raw) == expected


def test_sanitize_text_passes_through_none():
    assert sanitize_text(None) is None


# ===========================================================
# Rate windows
# ===========================================================
@pytest.mark.parametrize(
    "rate, expected",
    [
        ("100/15m", (100, 900)),
        ("10/h", (10, 3600)),
        ("5/2d", (5, 172800)),
        ("3/second", (3, 1)),
        (None, (None, None)),
    ],
)
def test_parse_rate(rate, expected):
    assert ApiRateThrottle().parse_rate(rate) == expected


def test_parse_rate_rejects_garbage():
    with pytest.raises(ValueError):
        ApiRateThrottle().parse_rate("10/fortnight")


# ===========================================================
# Configuration
# ===========================================================
def test_config_from_env_defaults():
    config = PortalConfig.from_env({})
    assert config.debug is False
    assert config.token_lifetime == timedelta(days=7)
    assert config.lock_threshold == 5
    assert config.lock_duration == timedelta(minutes=30)
    assert config.api_rate == "100/15m"
    assert config.login_rate == "10/h"
    assert config.transition_policy == "feedback.lifecycle.PermissiveTransitionPolicy"
    assert config.database.engine == "django.db.backends.sqlite3"


def test_config_from_env_overrides():
    config = PortalConfig.from_env({
        "DJANGO_DEBUG": "true",
        "DJANGO_ALLOWED_HOSTS": "api.example.edu, localhost",
        "LOGIN_LOCK_THRESHOLD": "3",
        "LOGIN_LOCK_MINUTES": "10",
        "AUDIT_ASYNC": "0",
        "TRANSITION_POLICY": "feedback.lifecycle.TerminalStateTransitionPolicy",
        "DB_ENGINE": "django.db.backends.postgresql",
        "DB_NAME": "feedback",
    })
    assert config.debug is True
    assert config.allowed_hosts == ["api.example.edu", "localhost"]
    assert config.lock_threshold == 3
    assert config.lock_duration == timedelta(minutes=10)
    assert config.audit_async is False
    assert config.transition_policy.endswith("TerminalStateTransitionPolicy")
    assert config.database.as_django(None)["NAME"] == "feedback"


# ===========================================================
# Health and error pages
# ===========================================================
def test_health_needs_no_token(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert "timestamp" in data


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Endpoint not found."}


# ===========================================================
# ensure_superadmin command
# ===========================================================
@pytest.mark.django_db
def test_ensure_superadmin_is_idempotent():
    call_command("ensure_superadmin", "--password", "Root-Pass-1", "--student-id", "00000009")
    call_command("ensure_superadmin", "--password", "Other-Pass-2", "--student-id", "00000010")

    admins = Account.objects.filter(role=Account.ROLE_SUPERADMIN)
    assert admins.count() == 1
    admin = admins.get()
    assert admin.student_id == "00000009"
    assert admin.is_superuser and admin.is_staff
    assert admin.check_password("Root-Pass-1")


@pytest.mark.django_db
def test_ensure_superadmin_requires_password(monkeypatch):
    monkeypatch.delenv("PORTAL_ADMIN_PASSWORD", raising=False)
    with pytest.raises(CommandError):
        call_command("ensure_superadmin", "--password", "")
