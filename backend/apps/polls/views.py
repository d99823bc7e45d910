"""
Views for the poll: public results and service status.
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.votes.engine import DecisionPolicy
from apps.votes.stores import get_vote_store
from core.throttles import GeneralRateThrottle

from .services import calculate_poll_results, get_poll_status

logger = logging.getLogger(__name__)


class PublicPollView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [GeneralRateThrottle]


class ResultsView(PublicPollView):
    """
    Current tally.

    GET /api/results
    """

    def get(self, request):
        policy = DecisionPolicy.from_settings()
        results = calculate_poll_results(get_vote_store(), policy.candidates)
        return Response(results, status=status.HTTP_200_OK)


class StatusView(PublicPollView):
    """
    Service and poll status.

    GET /api/status
    """

    def get(self, request):
        return Response(
            get_poll_status(get_vote_store(), DecisionPolicy.from_settings()),
            status=status.HTTP_200_OK,
        )
