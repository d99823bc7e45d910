"""
Client IP resolution behind reverse proxies.

Only trustworthy when the service sits behind a proxy that sets these
headers itself; otherwise clients can spoof them.
"""

from typing import Mapping, Optional

UNKNOWN_IP = "unknown"

# Highest precedence first
PROXY_IP_HEADERS = (
    "X-Forwarded-For",
    "X-Real-IP",
    "CF-Connecting-IP",
)


def _get_header(headers: Mapping, name: str) -> Optional[str]:
    """Case-insensitive header lookup that works on plain dicts too."""
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                value = candidate
                break
    return value


def resolve_client_ip(headers: Optional[Mapping], peer_address: Optional[str] = None) -> str:
    """
    Resolve the best-effort real client IP address.

    Precedence: X-Forwarded-For (first entry) -> X-Real-IP ->
    CF-Connecting-IP -> transport peer address -> "unknown".

    Args:
        headers: Request headers
        peer_address: Address of the transport-level peer

    Returns:
        str: IP address string or "unknown"
    """
    headers = headers or {}

    for name in PROXY_IP_HEADERS:
        value = _get_header(headers, name)
        if not value:
            continue
        # X-Forwarded-For may carry the whole proxy chain
        ip = value.split(",")[0].strip()
        if ip:
            return ip

    if peer_address:
        return peer_address.strip() or UNKNOWN_IP

    return UNKNOWN_IP


def extract_ip_address(request) -> str:
    """Get the client IP address from a Django request."""
    return resolve_client_ip(request.headers, request.META.get("REMOTE_ADDR"))
