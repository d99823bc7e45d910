"""
Fingerprint validation utilities.

Fingerprints arrive from unauthenticated clients, so they are checked for
shape before anything downstream compares or stores them.
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

FINGERPRINT_MIN_LENGTH = 10
FINGERPRINT_MAX_LENGTH = 64
FALLBACK_PREFIX = "fallback_"

# Alphanumerics plus the base64/url-safe punctuation produced by clients
FINGERPRINT_PATTERN = re.compile(r"^[A-Za-z0-9+/=._-]+$")


def validate_fingerprint_format(fingerprint) -> tuple[bool, Optional[str]]:
    """
    Validate fingerprint format.

    Accepts both primary tokens and ``fallback_``-prefixed tokens.

    Args:
        fingerprint: Fingerprint received from the client

    Returns:
        tuple: (is_valid: bool, error_message: Optional[str])
    """
    if fingerprint is None or fingerprint == "":
        return False, "Fingerprint is required"

    if not isinstance(fingerprint, str):
        return False, "Invalid fingerprint format: not a string"

    length = len(fingerprint)
    if length < FINGERPRINT_MIN_LENGTH or length > FINGERPRINT_MAX_LENGTH:
        return False, (
            f"Invalid fingerprint format: expected {FINGERPRINT_MIN_LENGTH}-"
            f"{FINGERPRINT_MAX_LENGTH} characters, got {length}"
        )

    if not FINGERPRINT_PATTERN.fullmatch(fingerprint):
        return False, "Invalid fingerprint format: unsupported characters"

    return True, None


def validate_fingerprint(fingerprint) -> bool:
    """Return True when the fingerprint is well formed."""
    is_valid, _ = validate_fingerprint_format(fingerprint)
    return is_valid


def is_fallback_fingerprint(fingerprint) -> bool:
    """
    Check whether a fingerprint came from the client's degraded fallback path.

    Fallback tokens are typical of private/incognito windows and are policed
    per IP address.
    """
    return isinstance(fingerprint, str) and fingerprint.startswith(FALLBACK_PREFIX)


def get_fallback_base(fingerprint: str) -> str:
    """
    Return the stable ``fallback_<hash>_<hash>`` part of a fallback token.

    Older clients appended a timestamp and random suffix to fallback tokens;
    those trailing components are dropped. Primary tokens are returned as is.
    """
    if not is_fallback_fingerprint(fingerprint):
        return fingerprint

    parts = fingerprint.split("_")
    if len(parts) >= 3:
        return "_".join(parts[:3])
    return fingerprint


def truncate_fingerprint(fingerprint, length: int = 10) -> str:
    """Shorten a fingerprint for logs and the attempt audit trail."""
    if not fingerprint:
        return ""
    fingerprint = str(fingerprint)
    if len(fingerprint) <= length:
        return fingerprint
    return f"{fingerprint[:length]}..."
