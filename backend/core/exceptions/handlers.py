"""
DRF exception handler for the voting API.

Every error body carries ``error``, ``error_code`` and ``status_code``;
vote rejections and framework errors with a known cause also carry the
short machine-readable ``reason`` that the audit log uses.
"""

import logging

from django.http import JsonResponse
from rest_framework import status
from rest_framework.views import exception_handler

from core.exceptions import StorageError, VotingError

logger = logging.getLogger(__name__)

# Reasons for framework errors that never pass through the decision engine
FRAMEWORK_REASONS = {
    status.HTTP_400_BAD_REQUEST: "malformed request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method not allowed",
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: "unsupported media type",
    status.HTTP_429_TOO_MANY_REQUESTS: "rate limited",
    status.HTTP_503_SERVICE_UNAVAILABLE: "not configured",
}


def _voting_error_response(exc):
    if isinstance(exc, StorageError):
        # Storage details stay in the server log
        message = StorageError.default_message
    else:
        message = exc.message

    return JsonResponse(
        {
            "error": message,
            "error_code": exc.__class__.__name__,
            "reason": exc.reason,
            "status_code": exc.status_code,
        },
        status=exc.status_code,
    )


def custom_exception_handler(exc, context):
    """
    Render vote rejections, DRF errors and unexpected failures.

    Returns:
        JsonResponse for VotingError and unhandled exceptions, otherwise the
        DRF response with its data reshaped
    """
    if isinstance(exc, VotingError):
        return _voting_error_response(exc)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            f"Unhandled exception in {view.__class__.__name__ if view else 'request'}: "
            f"{exc.__class__.__name__}: {exc}",
            exc_info=exc,
        )
        return JsonResponse(
            {
                "error": "An internal server error occurred",
                "error_code": "InternalServerError",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data = {
        "error": str(exc),
        "error_code": exc.__class__.__name__,
        "status_code": response.status_code,
    }

    detail = getattr(exc, "detail", None)
    if isinstance(detail, dict):
        data["errors"] = detail
    elif isinstance(detail, list):
        data["errors"] = {"detail": detail}
    elif detail is not None:
        data["error"] = str(detail)

    reason = FRAMEWORK_REASONS.get(response.status_code)
    if reason:
        data["reason"] = reason

    response.data = data
    return response
