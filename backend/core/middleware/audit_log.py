"""
Audit logging middleware for OneVote.
"""

import logging

from core.utils.client_ip import extract_ip_address

logger = logging.getLogger("onevote.audit")


class AuditLogMiddleware:
    """
    Middleware to log all API requests for audit purposes.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        # Skip logging for admin and static files
        if not request.path.startswith(("/admin/", "/static/", "/media/")):
            logger.info(
                f"Request: {request.method} {request.path} "
                f"from {extract_ip_address(request)} "
                f"status {response.status_code}"
            )

        return response
