"""
Tests for rate limiting throttles.
"""

import pytest
from django.test import RequestFactory, override_settings

from core.throttles import GeneralRateThrottle, VoteRateThrottle


def make_request(ip="8.8.8.8", user_agent="Mozilla/5.0 Firefox/120.0"):
    return RequestFactory().post(
        "/api/vote",
        HTTP_X_FORWARDED_FOR=ip,
        HTTP_USER_AGENT=user_agent,
    )


@pytest.mark.unit
class TestVoteRateThrottle:
    @override_settings(VOTE_RATE_LIMIT="2/min")
    def test_limit(self):
        throttle = VoteRateThrottle()
        request = make_request()

        assert throttle.allow_request(request, None) is True
        assert throttle.allow_request(request, None) is True
        assert throttle.allow_request(request, None) is False
        assert throttle.wait() > 0

    @override_settings(VOTE_RATE_LIMIT="1/min")
    def test_keyed_by_ip_and_user_agent(self):
        throttle = VoteRateThrottle()

        assert throttle.allow_request(make_request(), None) is True
        assert throttle.allow_request(make_request(user_agent="Safari/17.0"), None) is True
        assert throttle.allow_request(make_request(ip="1.1.1.1"), None) is True
        assert throttle.allow_request(make_request(), None) is False

    @override_settings(VOTE_RATE_LIMIT="1/min")
    def test_only_user_agent_prefix_counts(self):
        throttle = VoteRateThrottle()
        prefix = "M" * 50

        assert throttle.allow_request(make_request(user_agent=prefix + "-a"), None) is True
        assert throttle.allow_request(make_request(user_agent=prefix + "-b"), None) is False

    @override_settings(VOTE_RATE_LIMIT="1/min", DISABLE_RATE_LIMITING=True)
    def test_disabled(self):
        throttle = VoteRateThrottle()

        assert throttle.allow_request(make_request(), None) is True
        assert throttle.allow_request(make_request(), None) is True


@pytest.mark.unit
class TestGeneralRateThrottle:
    @override_settings(GENERAL_RATE_LIMIT="1/hour")
    def test_keyed_by_ip_only(self):
        throttle = GeneralRateThrottle()

        assert throttle.allow_request(make_request(), None) is True
        assert throttle.allow_request(make_request(user_agent="Safari/17.0"), None) is False
        assert throttle.allow_request(make_request(ip="1.1.1.1"), None) is True

    @override_settings(GENERAL_RATE_LIMIT=None)
    def test_no_rate_configured(self):
        throttle = GeneralRateThrottle()

        for _ in range(5):
            assert throttle.allow_request(make_request(), None) is True
