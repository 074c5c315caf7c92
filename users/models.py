# ===========================================================
# users/models.py
# ===========================================================

from datetime import timedelta

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.core.validators import RegexValidator
from django.db import models, transaction
from django.utils import timezone
import logging

logger = logging.getLogger("users")

student_id_validator = RegexValidator(r"^\d{8,12}$", "Student ID must be 8 to 12 digits.")
phone_validator = RegexValidator(r"^\+?\d{7,15}$", "Enter a valid phone number.")


# ===========================================================
# ACCOUNT MANAGER
# ===========================================================
class AccountManager(BaseUserManager):
    """Creates accounts with hashed passwords and normalized emails."""

    use_in_migrations = True

    def create_user(self, student_id, email, password=None, **extra_fields):
        if not student_id:
            raise ValueError("Accounts must have a student ID.")
        if not email:
            raise ValueError("Accounts must have an email.")

        extra_fields.setdefault("role", Account.ROLE_STUDENT)
        extra_fields.setdefault("is_active", True)

        account = self.model(
            student_id=student_id,
            email=self.normalize_email(email).lower(),
            **extra_fields,
        )
        account.set_password(password)
        account.save(using=self._db)

        logger.info(f"Account created: {student_id} ({account.role})")
        return account

    def create_superuser(self, student_id, email, password=None, **extra_fields):
        extra_fields.setdefault("role", Account.ROLE_SUPERADMIN)
        if extra_fields["role"] != Account.ROLE_SUPERADMIN:
            raise ValueError("Superuser must have the superadmin role.")
        if not password:
            raise ValueError("Superuser must have a password.")
        return self.create_user(student_id, email, password, **extra_fields)


# ===========================================================
# ACCOUNT MODEL
# ===========================================================
class Account(AbstractBaseUser, PermissionsMixin):
    """
    Portal account: students submit feedback, admins triage it.

    Accounts are never deleted; ``is_active`` switches them off. The lockout
    state (``login_attempts`` / ``lock_until``) is owned by the login flow in
    ``users.services.AuthService``.
    """

    ROLE_STUDENT = "student"
    ROLE_ADMIN = "admin"
    ROLE_SUPERADMIN = "superadmin"

    ROLE_CHOICES = [
        (ROLE_STUDENT, "Student"),
        (ROLE_ADMIN, "Admin"),
        (ROLE_SUPERADMIN, "Super Admin"),
    ]

    # ---------- IDENTITY ----------
    student_id = models.CharField(
        max_length=12,
        unique=True,
        validators=[student_id_validator],
        help_text="Numeric student identifier (8-12 digits); used to log in.",
    )
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=50)
    phone = models.CharField(max_length=16, blank=True, null=True, validators=[phone_validator])

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_STUDENT,
        db_index=True,
    )

    # ---------- FLAGS ----------
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False, editable=False)

    # ---------- LOCKOUT ----------
    login_attempts = models.PositiveIntegerField(default=0)
    lock_until = models.DateTimeField(null=True, blank=True)

    # ---------- AUDIT ----------
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AccountManager()

    USERNAME_FIELD = "student_id"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["email", "name"]

    class Meta:
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        ordering = ["student_id"]
        indexes = [
            models.Index(fields=["role", "is_active"], name="account_role_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.student_id})"

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name

    def save(self, *args, **kwargs):
        # Staff/superuser flags follow the role so the Django admin stays consistent.
        self.is_staff = self.role in (self.ROLE_ADMIN, self.ROLE_SUPERADMIN)
        self.is_superuser = self.role == self.ROLE_SUPERADMIN
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "role" in update_fields:
            kwargs["update_fields"] = set(update_fields) | {"is_staff", "is_superuser"}
        super().save(*args, **kwargs)

    # ======================================================
    # LOCKOUT
    # ======================================================
    def is_locked(self, now=None):
        now = now or timezone.now()
        return bool(self.lock_until and self.lock_until > now)

    def clear_expired_lock(self, now=None):
        """A lock whose instant has passed starts a fresh attempt window."""
        now = now or timezone.now()
        if self.lock_until and self.lock_until <= now:
            self.login_attempts = 0
            self.lock_until = None
            self.save(update_fields=["login_attempts", "lock_until", "updated_at"])
            logger.info(f"Lock expired for {self.student_id}")

    @transaction.atomic
    def register_failed_login(self, threshold, lock_duration: timedelta):
        """Increment the failure counter; lock once it reaches ``threshold``."""
        Account.objects.filter(pk=self.pk).update(
            login_attempts=models.F("login_attempts") + 1
        )
        self.refresh_from_db(fields=["login_attempts", "lock_until"])

        if self.login_attempts >= threshold:
            self.lock_until = timezone.now() + lock_duration
            self.save(update_fields=["lock_until", "updated_at"])
            logger.warning(f"Account locked until {self.lock_until:%Y-%m-%d %H:%M}: {self.student_id}")
        else:
            logger.info(f"Failed login for {self.student_id}: {self.login_attempts}/{threshold}")

    def register_successful_login(self):
        self.login_attempts = 0
        self.lock_until = None
        self.last_login = timezone.now()
        self.save(update_fields=["login_attempts", "lock_until", "last_login", "updated_at"])
