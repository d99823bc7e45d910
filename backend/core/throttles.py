"""
Rate limiting throttles for Django REST Framework.

Provides:
- A general per-IP limit for every endpoint
- A stricter vote limit keyed by IP and browser
- Rates read from settings at request time
- Load test bypass
"""

import hashlib

from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle

from core.utils.client_ip import extract_ip_address

VOTE_THROTTLE_UA_LENGTH = 50


class LoadTestBypassMixin:
    """Mixin to bypass rate limiting for load tests."""

    def allow_request(self, request, view):
        """Check if request should bypass rate limiting."""
        if getattr(settings, "DISABLE_RATE_LIMITING", False):
            return True

        return super().allow_request(request, view)


class SettingsRateThrottle(LoadTestBypassMixin, SimpleRateThrottle):
    """
    Throttle whose rate comes from a Django setting.

    DRF resolves ``THROTTLE_RATES`` once at import time; reading the setting
    on each request lets tests and deployments override it.
    """

    rate_setting = None
    default_rate = None

    def __init__(self):
        # Rate is resolved lazily in allow_request
        pass

    def get_rate(self):
        return getattr(settings, self.rate_setting, self.default_rate)

    def allow_request(self, request, view):
        self.rate = self.get_rate()
        self.num_requests, self.duration = self.parse_rate(self.rate)
        return super().allow_request(request, view)

    def get_ident(self, request):
        return extract_ip_address(request)


class GeneralRateThrottle(SettingsRateThrottle):
    """Per-IP limit applied to every endpoint."""

    scope = "general"
    rate_setting = "GENERAL_RATE_LIMIT"
    default_rate = "100/hour"

    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}


class VoteRateThrottle(SettingsRateThrottle):
    """Vote endpoint limit keyed by IP plus the start of the User-Agent."""

    scope = "vote"
    rate_setting = "VOTE_RATE_LIMIT"
    default_rate = "2/min"

    def get_cache_key(self, request, view):
        user_agent = request.META.get("HTTP_USER_AGENT", "")[:VOTE_THROTTLE_UA_LENGTH]
        # Cache keys must not contain the spaces found in User-Agent strings
        ua_digest = hashlib.sha256(user_agent.encode("utf-8")).hexdigest()[:16]
        ident = f"{self.get_ident(request)}:{ua_digest}"
        return self.cache_format % {"scope": self.scope, "ident": ident}
