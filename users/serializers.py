# ===========================================================
# users/serializers.py
# ===========================================================

from django.contrib.auth import password_validation
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from feedback_portal.text import sanitize_text
from .models import Account, phone_validator, student_id_validator


def _validate_new_password(value):
    try:
        password_validation.validate_password(value)
    except DjangoValidationError as exc:
        raise serializers.ValidationError(list(exc.messages))
    return value


# ===========================================================
# 1. LOGIN
# ===========================================================
class LoginSerializer(serializers.Serializer):
    student_id = serializers.CharField(max_length=64, trim_whitespace=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)


# ===========================================================
# 2. REGISTER
# ===========================================================
class RegisterSerializer(serializers.Serializer):
    student_id = serializers.CharField(validators=[student_id_validator])
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    name = serializers.CharField(max_length=50)
    email = serializers.EmailField()
    phone = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, validators=[phone_validator]
    )

    def validate_name(self, value):
        value = sanitize_text(value)
        if not value:
            raise serializers.ValidationError("Name cannot be blank.")
        return value

    def validate_email(self, value):
        return value.strip().lower()

    def validate_password(self, value):
        return _validate_new_password(value)


# ===========================================================
# 3. CHANGE PASSWORD
# ===========================================================
class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_new_password(self, value):
        return _validate_new_password(value)


# ===========================================================
# 4. PROFILE (public representation, never the hash)
# ===========================================================
class ProfileSerializer(serializers.ModelSerializer):

    class Meta:
        model = Account
        fields = [
            "id",
            "student_id",
            "name",
            "email",
            "phone",
            "role",
            "is_active",
            "last_login",
            "created_at",
        ]
        read_only_fields = fields
