# ===========================================================
# users/services.py
# ===========================================================
"""
Credential store operations: login with lockout, registration, password change.
"""

from dataclasses import dataclass

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError
import logging

from audit.models import AuditEntry
from feedback_portal.exceptions import (
    AccountDisabled,
    AccountLocked,
    ConflictError,
    InvalidCredentials,
)
from feedback_portal.text import sanitize_text
from .models import Account

logger = logging.getLogger("users")


@dataclass(frozen=True)
class LoginResult:
    token: str
    account: Account


class AuthService:

    def __init__(self, config, token_issuer, recorder):
        self.lock_threshold = config.lock_threshold
        self.lock_duration = config.lock_duration
        self.token_issuer = token_issuer
        self.recorder = recorder

    # ======================================================
    # LOGIN
    # ======================================================
    def authenticate(self, identifier, secret, meta=None) -> LoginResult:
        """
        Verify credentials and issue a token.

        Unknown identifier and wrong password raise the same
        ``InvalidCredentials``. A live lock is reported before the password
        is looked at.
        """
        account = Account.objects.filter(student_id=identifier).first()
        if account is None:
            logger.info("Login failed: unknown identifier")
            raise InvalidCredentials()

        if account.is_locked():
            logger.warning(f"Login refused, account locked: {account.student_id}")
            raise AccountLocked()
        account.clear_expired_lock()

        if not account.check_password(secret):
            account.register_failed_login(self.lock_threshold, self.lock_duration)
            raise InvalidCredentials()

        if not account.is_active:
            logger.warning(f"Login refused, account disabled: {account.student_id}")
            raise AccountDisabled()

        account.register_successful_login()
        token = self.token_issuer.issue(account)

        self.recorder.record(
            AuditEntry.ACTION_LOGIN, "user",
            actor_id=account.pk, resource_id=account.pk, meta=meta,
        )
        logger.info(f"Login successful: {account.student_id}")
        return LoginResult(token=token, account=account)

    # ======================================================
    # REGISTRATION
    # ======================================================
    def register(self, student_id, password, name, email, phone=None, meta=None) -> Account:
        """
        Create a student account.

        Reports which of student id / email is already taken. This check is
        not timing-safe, so it does reveal registered identifiers.
        """
        email = email.strip().lower()
        self._check_available(student_id, email)

        try:
            with transaction.atomic():
                account = Account.objects.create_user(
                    student_id=student_id,
                    email=email,
                    password=password,
                    name=sanitize_text(name),
                    phone=sanitize_text(phone) or None,
                )
        except IntegrityError:
            # Lost a race with a concurrent registration.
            self._check_available(student_id, email)
            raise

        self.recorder.record(
            AuditEntry.ACTION_REGISTER, "user",
            actor_id=account.pk, resource_id=account.pk,
            details={"student_id": student_id}, meta=meta,
        )
        return account

    def _check_available(self, student_id, email):
        if Account.objects.filter(student_id=student_id).exists():
            raise ConflictError("student_id", "Student ID is already registered.")
        if Account.objects.filter(email__iexact=email).exists():
            raise ConflictError("email", "Email is already registered.")

    # ======================================================
    # PASSWORD CHANGE
    # ======================================================
    def change_password(self, account, current_password, new_password, meta=None):
        if not account.check_password(current_password):
            raise ValidationError({"current_password": ["Current password is incorrect."]})

        account.set_password(new_password)
        account.save(update_fields=["password", "updated_at"])

        self.recorder.record(
            AuditEntry.ACTION_PASSWORD_CHANGE, "user",
            actor_id=account.pk, resource_id=account.pk, meta=meta,
        )
        logger.info(f"Password changed for {account.student_id}")
