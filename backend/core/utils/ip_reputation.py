"""
IP reputation checks against an external IP-intelligence service.

Classifies an address as anonymizing infrastructure (VPN, proxy, hosting
datacenter) or not. The check is advisory and fails open: when the service
is slow, unreachable or answers with an error, the address is treated as not
anonymizing so that an outage never blocks legitimate voters.
"""

import ipaddress
import logging
from typing import NamedTuple, Optional

import requests
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

DEFAULT_REPUTATION_URL = "http://ip-api.com/json/{ip}"
DEFAULT_REPUTATION_TIMEOUT = 3.0  # seconds
DEFAULT_REPUTATION_CACHE_TTL = 3600  # 1 hour
REPUTATION_FIELDS = "status,message,proxy,hosting"


class ReputationResult(NamedTuple):
    """Outcome of a reputation lookup."""

    is_anonymizing: bool
    error: Optional[str] = None


def is_public_ip(ip_address: Optional[str]) -> bool:
    """Return True for globally routable addresses worth looking up."""
    if not ip_address:
        return False
    try:
        return ipaddress.ip_address(ip_address).is_global
    except ValueError:
        return False


def get_reputation_cache_key(ip_address: str) -> str:
    """Generate cache key for a reputation lookup."""
    return f"ip_reputation:{ip_address}"


class IPReputationChecker:
    """
    Query the reputation service for proxy/hosting classification.

    Only the classification fields are requested to keep the payload small.
    """

    # Declared default when the dependency fails
    fail_open_result = ReputationResult(is_anonymizing=False)

    def __init__(
        self,
        url_template: str = DEFAULT_REPUTATION_URL,
        timeout: float = DEFAULT_REPUTATION_TIMEOUT,
        cache_ttl: int = DEFAULT_REPUTATION_CACHE_TTL,
        session=None,
    ):
        """
        Args:
            url_template: Endpoint with an ``{ip}`` placeholder
            timeout: Seconds to wait for the service before failing open
            cache_ttl: Seconds to cache successful lookups (0 disables caching)
            session: Optional HTTP client with a ``get`` method, such as a
                ``requests.Session`` owned by the caller; defaults to the
                module-level ``requests.get``
        """
        self.url_template = url_template
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.session = session

    @classmethod
    def from_settings(cls):
        """Build a checker from Django settings."""
        return cls(
            url_template=getattr(settings, "IP_REPUTATION_URL", DEFAULT_REPUTATION_URL),
            timeout=getattr(settings, "IP_REPUTATION_TIMEOUT", DEFAULT_REPUTATION_TIMEOUT),
            cache_ttl=getattr(settings, "IP_REPUTATION_CACHE_TTL", DEFAULT_REPUTATION_CACHE_TTL),
        )

    def _fail_open(self, error: str) -> ReputationResult:
        return self.fail_open_result._replace(error=error)

    def check(self, ip_address: Optional[str]) -> ReputationResult:
        """
        Classify an IP address.

        Args:
            ip_address: Resolved client IP address

        Returns:
            ReputationResult: ``is_anonymizing`` plus an error string when the
            lookup failed open
        """
        # Private, loopback and unparsable addresses have nothing to look up
        if not is_public_ip(ip_address):
            return ReputationResult(is_anonymizing=False)

        cache_key = get_reputation_cache_key(ip_address)
        if self.cache_ttl:
            cached = cache.get(cache_key)
            if cached is not None:
                return ReputationResult(is_anonymizing=bool(cached))

        url = self.url_template.format(ip=ip_address)
        try:
            http = self.session or requests
            response = http.get(
                url,
                params={"fields": REPUTATION_FIELDS},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.warning(f"IP reputation lookup timed out for {ip_address}")
            return self._fail_open("API timeout")
        except requests.RequestException as e:
            logger.error(f"IP reputation lookup failed for {ip_address}: {e}")
            return self._fail_open("API connection failed")

        if response.status_code != 200:
            logger.warning(
                f"IP reputation service returned HTTP {response.status_code} for {ip_address}"
            )
            return self._fail_open(f"API Error: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"IP reputation service returned invalid JSON for {ip_address}")
            return self._fail_open("API Error: invalid response")

        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message") if isinstance(data, dict) else None
            return self._fail_open(f"API Error: {message}")

        is_anonymizing = bool(data.get("proxy") or data.get("hosting"))
        if self.cache_ttl:
            try:
                cache.set(cache_key, is_anonymizing, self.cache_ttl)
            except Exception as e:
                logger.error(f"Error caching IP reputation for {ip_address}: {e}")

        if is_anonymizing:
            logger.info(f"Anonymizing network detected for {ip_address}")

        return ReputationResult(is_anonymizing=is_anonymizing)


class DisabledReputationChecker:
    """Checker used when reputation lookups are turned off."""

    def check(self, ip_address: Optional[str]) -> ReputationResult:
        return ReputationResult(is_anonymizing=False)


def get_reputation_checker():
    """Build the reputation checker configured in settings."""
    if not getattr(settings, "IP_REPUTATION_ENABLED", True):
        return DisabledReputationChecker()
    return IPReputationChecker.from_settings()
