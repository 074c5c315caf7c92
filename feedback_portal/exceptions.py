# ===========================================================
# feedback_portal/exceptions.py
# ===========================================================
"""
Error taxonomy and the DRF exception handler.

Every error leaves the API as ``{"success": false, "message": ..., "errors"?}``.
Views and services raise these exceptions; nothing builds error responses
by hand.
"""

import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.serializers import as_serializer_error

logger = logging.getLogger("feedback_portal")

GENERIC_SERVER_ERROR = "Server error, please try again later."


# ===========================================================
# Domain exceptions
# ===========================================================
class Unauthenticated(exceptions.AuthenticationFailed):
    """Missing, malformed, expired or orphaned bearer token."""
    default_detail = "Authentication failed, please log in again."
    default_code = "unauthenticated"


class InvalidCredentials(exceptions.APIException):
    # Same message for unknown identifier and wrong password.
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid student ID or password."
    default_code = "invalid_credentials"


class AccountDisabled(exceptions.APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Account is disabled."
    default_code = "account_disabled"


class AccountLocked(exceptions.APIException):
    status_code = status.HTTP_423_LOCKED
    default_detail = "Account is temporarily locked, please try again later."
    default_code = "account_locked"


class Forbidden(exceptions.PermissionDenied):
    default_detail = "You do not have permission to perform this action."
    default_code = "forbidden"


class NotFound(exceptions.NotFound):
    default_detail = "Resource not found."


class ConflictError(exceptions.APIException):
    """Duplicate identifier or email; ``field`` names which one collided."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Account already exists."
    default_code = "conflict"

    def __init__(self, field, detail=None):
        super().__init__(detail=detail)
        self.field = field


class InvalidTransition(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This status change is not allowed."
    default_code = "invalid_transition"


class StorageError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = GENERIC_SERVER_ERROR
    default_code = "storage_error"


# ===========================================================
# Helpers
# ===========================================================
def _first_message(detail):
    """Flatten a DRF error detail into one human-readable line."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if key in ("detail", "non_field_errors"):
                return message
            return f"{key}: {message}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def error_payload(message, errors=None):
    payload = {"success": False, "message": message}
    if errors:
        payload["errors"] = errors
    return payload


# ===========================================================
# DRF exception handler
# ===========================================================
def portal_exception_handler(exc, context):
    # rest_framework.views loads the authentication classes, which import this module.
    from rest_framework.views import exception_handler

    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(detail=as_serializer_error(exc))

    if isinstance(exc, DatabaseError):
        logger.exception("Storage failure in %s", context.get("view").__class__.__name__)
        exc = StorageError(detail=str(exc) if settings.DEBUG else None)

    response = exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled error", exc_info=exc)
        message = str(exc) if settings.DEBUG else GENERIC_SERVER_ERROR
        return Response(error_payload(message), status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if response.status_code >= 500:
        logger.error("Server error response: %s", exc)

    if isinstance(exc, exceptions.Throttled):
        response.data = error_payload("Too many requests, please try again later.")
        return response

    if isinstance(exc, ConflictError):
        response.data = error_payload(str(exc.detail), {exc.field: [str(exc.detail)]})
        return response

    detail = getattr(exc, "detail", response.data)
    errors = detail if isinstance(detail, dict) else None
    response.data = error_payload(_first_message(detail), errors)
    return response
