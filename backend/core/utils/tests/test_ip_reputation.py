"""
Tests for the IP reputation checker.
"""

from unittest.mock import Mock, patch

import pytest
import requests
from core.utils.ip_reputation import (
    DisabledReputationChecker,
    IPReputationChecker,
    get_reputation_cache_key,
    get_reputation_checker,
    is_public_ip,
)
from django.core.cache import cache
from django.test import override_settings

PUBLIC_IP = "8.8.8.8"


def make_response(status_code=200, payload=None, json_error=False):
    response = Mock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


def make_checker(response=None, side_effect=None, cache_ttl=3600):
    session = Mock()
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        session.get.return_value = response
    return IPReputationChecker(timeout=2, cache_ttl=cache_ttl, session=session), session


@pytest.mark.unit
class TestIsPublicIP:
    @pytest.mark.parametrize("ip", ["8.8.8.8", "1.1.1.1", "2001:4860:4860::8888"])
    def test_public(self, ip):
        assert is_public_ip(ip) is True

    @pytest.mark.parametrize("ip", ["127.0.0.1", "10.0.0.1", "192.168.1.1", "::1", "unknown", "", None])
    def test_not_public(self, ip):
        assert is_public_ip(ip) is False


class TestIPReputationChecker:
    def test_clean_address(self):
        checker, session = make_checker(
            make_response(payload={"status": "success", "proxy": False, "hosting": False})
        )
        result = checker.check(PUBLIC_IP)

        assert result.is_anonymizing is False
        assert result.error is None
        session.get.assert_called_once_with(
            "http://ip-api.com/json/8.8.8.8",
            params={"fields": "status,message,proxy,hosting"},
            timeout=2,
        )

    def test_proxy_flagged(self):
        checker, _ = make_checker(
            make_response(payload={"status": "success", "proxy": True, "hosting": False})
        )
        assert checker.check(PUBLIC_IP).is_anonymizing is True

    def test_hosting_flagged(self):
        checker, _ = make_checker(
            make_response(payload={"status": "success", "proxy": False, "hosting": True})
        )
        assert checker.check(PUBLIC_IP).is_anonymizing is True

    def test_timeout_fails_open(self):
        checker, _ = make_checker(side_effect=requests.Timeout("timed out"))
        result = checker.check(PUBLIC_IP)

        assert result.is_anonymizing is False
        assert result.error == "API timeout"

    def test_connection_error_fails_open(self):
        checker, _ = make_checker(side_effect=requests.ConnectionError("refused"))
        result = checker.check(PUBLIC_IP)

        assert result.is_anonymizing is False
        assert result.error == "API connection failed"

    def test_http_error_fails_open(self):
        checker, _ = make_checker(make_response(status_code=429))
        result = checker.check(PUBLIC_IP)

        assert result.is_anonymizing is False
        assert result.error == "API Error: HTTP 429"

    def test_invalid_json_fails_open(self):
        checker, _ = make_checker(make_response(json_error=True))
        assert checker.check(PUBLIC_IP).is_anonymizing is False

    def test_service_failure_status_fails_open(self):
        checker, _ = make_checker(make_response(payload={"status": "fail", "message": "reserved range"}))
        result = checker.check(PUBLIC_IP)

        assert result.is_anonymizing is False
        assert result.error == "API Error: reserved range"

    def test_private_address_not_looked_up(self):
        checker, session = make_checker(make_response(payload={"status": "success", "proxy": True}))
        result = checker.check("192.168.1.10")

        assert result.is_anonymizing is False
        session.get.assert_not_called()

    def test_successful_lookup_cached(self):
        checker, session = make_checker(
            make_response(payload={"status": "success", "proxy": True, "hosting": False})
        )
        assert checker.check(PUBLIC_IP).is_anonymizing is True
        assert checker.check(PUBLIC_IP).is_anonymizing is True

        assert session.get.call_count == 1
        assert cache.get(get_reputation_cache_key(PUBLIC_IP)) is True

    def test_failures_not_cached(self):
        checker, session = make_checker(side_effect=requests.Timeout("timed out"))
        checker.check(PUBLIC_IP)
        checker.check(PUBLIC_IP)

        assert session.get.call_count == 2

    def test_default_checker_uses_module_level_get(self):
        checker = IPReputationChecker(timeout=2)
        response = make_response(payload={"status": "success", "proxy": False, "hosting": True})

        with patch("core.utils.ip_reputation.requests.get", return_value=response) as mock_get:
            result = checker.check(PUBLIC_IP)

        assert checker.session is None
        assert result.is_anonymizing is True
        mock_get.assert_called_once_with(
            "http://ip-api.com/json/8.8.8.8",
            params={"fields": "status,message,proxy,hosting"},
            timeout=2,
        )


class TestGetReputationChecker:
    @override_settings(IP_REPUTATION_ENABLED=False)
    def test_disabled(self):
        checker = get_reputation_checker()
        assert isinstance(checker, DisabledReputationChecker)
        assert checker.check(PUBLIC_IP).is_anonymizing is False

    @override_settings(
        IP_REPUTATION_ENABLED=True,
        IP_REPUTATION_URL="https://reputation.example/{ip}",
        IP_REPUTATION_TIMEOUT=1.5,
    )
    def test_from_settings(self):
        checker = get_reputation_checker()
        assert isinstance(checker, IPReputationChecker)
        assert checker.url_template == "https://reputation.example/{ip}"
        assert checker.timeout == 1.5
