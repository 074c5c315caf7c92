# ===========================================================
# feedback_portal/config.py
# ===========================================================
"""
Process-wide configuration for the feedback portal.

``PortalConfig`` is built exactly once, in ``settings.py``, from the
environment. Django settings are derived from it and the service objects
(token issuer, auth service, lifecycle engine, audit recorder) receive it
explicitly when they are wired up in ``AppConfig.ready()``.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta


def _env_bool(environ, key, default):
    value = environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(environ, key, default):
    value = environ.get(key)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class DatabaseConfig:
    engine: str = "django.db.backends.sqlite3"
    name: str = "db.sqlite3"
    user: str = ""
    password: str = ""
    host: str = ""
    port: str = ""

    def as_django(self, base_dir):
        if self.engine.endswith("sqlite3"):
            return {"ENGINE": self.engine, "NAME": base_dir / self.name}
        return {
            "ENGINE": self.engine,
            "NAME": self.name,
            "USER": self.user,
            "PASSWORD": self.password,
            "HOST": self.host,
            "PORT": self.port,
        }


@dataclass(frozen=True)
class PortalConfig:
    secret_key: str
    debug: bool = False
    allowed_hosts: list = field(default_factory=lambda: ["*"])
    cors_allowed_origins: list = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    # Authentication
    token_lifetime: timedelta = timedelta(days=7)
    lock_threshold: int = 5
    lock_duration: timedelta = timedelta(minutes=30)

    # Boundary rate limits ("<count>/<window>", e.g. "100/15m")
    api_rate: str = "100/15m"
    login_rate: str = "10/h"

    # Ticket workflow
    transition_policy: str = "feedback.lifecycle.PermissiveTransitionPolicy"

    # Audit sink runs on a background pool when true
    audit_async: bool = True

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        database = DatabaseConfig(
            engine=environ.get("DB_ENGINE", DatabaseConfig.engine),
            name=environ.get("DB_NAME", DatabaseConfig.name),
            user=environ.get("DB_USER", ""),
            password=environ.get("DB_PASSWORD", ""),
            host=environ.get("DB_HOST", ""),
            port=environ.get("DB_PORT", ""),
        )
        return cls(
            secret_key=environ.get("DJANGO_SECRET_KEY", "django-insecure-feedback-portal-dev-key"),
            debug=_env_bool(environ, "DJANGO_DEBUG", False),
            allowed_hosts=_env_list(environ, "DJANGO_ALLOWED_HOSTS", ["*"]),
            cors_allowed_origins=_env_list(
                environ,
                "CORS_ALLOWED_ORIGINS",
                ["http://localhost:3000", "http://localhost:5173"],
            ),
            database=database,
            token_lifetime=timedelta(days=int(environ.get("JWT_LIFETIME_DAYS", "7"))),
            lock_threshold=int(environ.get("LOGIN_LOCK_THRESHOLD", "5")),
            lock_duration=timedelta(minutes=int(environ.get("LOGIN_LOCK_MINUTES", "30"))),
            api_rate=environ.get("API_RATE", "100/15m"),
            login_rate=environ.get("LOGIN_RATE", "10/h"),
            transition_policy=environ.get(
                "TRANSITION_POLICY", "feedback.lifecycle.PermissiveTransitionPolicy"
            ),
            audit_async=_env_bool(environ, "AUDIT_ASYNC", True),
        )
