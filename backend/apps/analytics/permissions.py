"""
Custom permissions for Analytics app.
"""

import hmac
import logging

from django.conf import settings
from rest_framework import permissions, status
from rest_framework.exceptions import APIException

logger = logging.getLogger(__name__)

ADMIN_KEY_MIN_LENGTH = 10
WEAK_ADMIN_KEYS = frozenset({"admin123"})


class AdminAccessNotConfigured(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Admin access not configured"
    default_code = "admin_not_configured"


class InvalidAdminKey(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "invalid_admin_key"


def admin_key_is_configured(admin_key) -> bool:
    """A usable operator secret is set and is not a known weak value."""
    return bool(admin_key) and admin_key not in WEAK_ADMIN_KEYS and len(admin_key) >= ADMIN_KEY_MIN_LENGTH


class HasAdminLogKey(permissions.BasePermission):
    """
    Permission class that requires the operator secret as ``auth_key``.

    - 503 when the secret is unset or weak
    - 401 when the supplied key does not match
    """

    def has_permission(self, request, view):
        admin_key = getattr(settings, "ADMIN_LOG_KEY", "")
        if not admin_key_is_configured(admin_key):
            logger.error("Admin log access attempted but ADMIN_LOG_KEY is not configured securely")
            raise AdminAccessNotConfigured()

        supplied = request.query_params.get("auth_key", "")
        if not hmac.compare_digest(supplied.encode("utf-8"), admin_key.encode("utf-8")):
            logger.warning("Rejected admin log access with invalid key")
            raise InvalidAdminKey()

        return True
