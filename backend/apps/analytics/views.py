"""
Views for Analytics app: operator access to the attempt log.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.votes.stores import get_vote_store
from core.services.admin_dashboard import get_attempt_log_report
from core.throttles import GeneralRateThrottle

from .permissions import HasAdminLogKey

logger = logging.getLogger(__name__)


class AdminLogsView(APIView):
    """
    Recent vote attempts with aggregate statistics.

    GET /api/admin/logs?auth_key=...

    Returns:
    - 200 OK: {"logs": [...], "statistics": {...}}
    - 401 Unauthorized: Key does not match
    - 503 Service Unavailable: Operator key not configured
    """

    authentication_classes = []
    permission_classes = [HasAdminLogKey]
    throttle_classes = [GeneralRateThrottle]

    def get(self, request):
        report = get_attempt_log_report(get_vote_store())
        logger.info(f"Admin log report served: {report['statistics']['total_attempts']} attempts")
        return Response(report, status=status.HTTP_200_OK)
