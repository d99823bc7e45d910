"""
Views for Votes app.
"""

import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ParseError, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import RateLimitExceededError, RequestTooLargeError
from core.throttles import GeneralRateThrottle, VoteRateThrottle
from core.utils.client_ip import extract_ip_address

from .audit import AttemptLogger
from .serializers import VoteCastSerializer, VoteResponseSerializer
from .services import cast_vote
from .stores import get_vote_store

logger = logging.getLogger(__name__)

DEFAULT_MAX_BODY_BYTES = 1000
MALFORMED_REQUEST_REASON = "malformed request"


class VoteView(APIView):
    """
    Cast a vote.

    POST /api/vote

    Request Body:
    {
        "candidate": "ersin-tatar",
        "fingerprint": "fp_..."
    }

    Returns:
    - 200 OK: Vote recorded
    - 400 Bad Request: Missing or invalid candidate/fingerprint
    - 403 Forbidden: Poll closed or anonymizing network detected
    - 409 Conflict: Duplicate vote or fraud heuristic triggered
    - 413 Payload Too Large: Request body too large
    - 429 Too Many Requests: Rate limit exceeded
    - 500 Internal Server Error: Vote could not be stored
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [GeneralRateThrottle, VoteRateThrottle]

    def log_rejected_attempt(self, request, reason):
        """Audit a request turned away before it reaches the decision engine."""
        AttemptLogger(get_vote_store()).log(
            extract_ip_address(request),
            None,
            None,
            False,
            reason,
        )

    def throttled(self, request, wait):
        """Audit throttled vote attempts before rejecting them."""
        self.log_rejected_attempt(request, RateLimitExceededError.reason)
        super().throttled(request, wait)

    def post(self, request):
        max_body_bytes = getattr(settings, "VOTE_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES)
        if len(request.body) > max_body_bytes:
            self.log_rejected_attempt(request, RequestTooLargeError.reason)
            raise RequestTooLargeError()

        try:
            serializer = VoteCastSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
        except (ParseError, ValidationError):
            self.log_rejected_attempt(request, MALFORMED_REQUEST_REASON)
            raise

        decision = cast_vote(
            ip_address=extract_ip_address(request),
            fingerprint=serializer.validated_data.get("fingerprint"),
            candidate=serializer.validated_data.get("candidate"),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

        response = VoteResponseSerializer(
            {
                "success": decision.accepted,
                "message": "Vote recorded successfully",
                "timestamp": timezone.now(),
            }
        )
        return Response(response.data, status=status.HTTP_200_OK)
