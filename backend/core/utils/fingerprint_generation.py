"""
Device fingerprint generation.

Mirrors what the voting page does in the browser: hash a canonical set of
stable device/browser signals into a token that survives page reloads. When
the richer signal collection fails (typically inside a private window that
blocks storage or graphics APIs) a degraded ``fallback_`` token is produced
instead, so the server can police it per network.

Both paths are deterministic: the same device state always yields the same
token. Signals that change between calls in the same browser (canvas pixel
data, timestamps, random salts) are never hashed.
"""

import hashlib
import logging
from typing import Callable, Dict, Mapping, Optional, Tuple

from core.utils.fingerprint_validation import (
    FALLBACK_PREFIX,
    FINGERPRINT_MAX_LENGTH,
    validate_fingerprint,
)

logger = logging.getLogger(__name__)

PRIMARY_PREFIX = "fp_"

# Order matters: it defines the canonical concatenation
PRIMARY_SIGNALS = (
    "user_agent",
    "language",
    "platform",
    "screen",
    "timezone",
    "hardware_concurrency",
    "gpu_renderer",
    "audio_sample_rate",
    "features",
)
REQUIRED_PRIMARY_SIGNALS = ("user_agent", "screen", "gpu_renderer")

# Signals that differ between calls in the same browser
VOLATILE_SIGNALS = frozenset({"canvas", "canvas_data_url", "timestamp", "nonce", "random"})

FALLBACK_BROWSER_SIGNALS = ("user_agent", "language", "platform")
FALLBACK_DISPLAY_SIGNALS = ("screen", "timezone")
FALLBACK_HASH_LENGTH = 12


class FingerprintGenerationError(Exception):
    """Raised when the primary fingerprint path cannot run."""


def _canonical_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Mapping):
        return ",".join(
            f"{key}={_canonical_value(value[key])}" for key in sorted(value)
        )
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value) if isinstance(value, (set, frozenset)) else value
        return ",".join(_canonical_value(item) for item in items)
    return str(value).strip()


def canonicalize_signals(signals: Mapping, keys) -> str:
    """Join the selected signals into one ordered, volatile-free string."""
    return "|".join(
        f"{key}:{_canonical_value(signals.get(key))}"
        for key in keys
        if key not in VOLATILE_SIGNALS
    )


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def generate_primary_fingerprint(signals: Mapping) -> str:
    """
    Build the primary fingerprint from stable device signals.

    Args:
        signals: Mapping of signal name to value (see ``PRIMARY_SIGNALS``)

    Returns:
        str: ``fp_`` followed by a SHA-256 hex digest, capped at 64 characters

    Raises:
        FingerprintGenerationError: If a required signal is missing
    """
    missing = [key for key in REQUIRED_PRIMARY_SIGNALS if not signals.get(key)]
    if missing:
        raise FingerprintGenerationError(
            f"Missing fingerprint signals: {', '.join(missing)}"
        )

    canonical = canonicalize_signals(signals, PRIMARY_SIGNALS)
    return f"{PRIMARY_PREFIX}{_digest(canonical)}"[:FINGERPRINT_MAX_LENGTH]


def generate_fallback_fingerprint(signals: Optional[Mapping] = None) -> str:
    """
    Build the degraded fingerprint used when primary collection fails.

    The token is ``fallback_<browser hash>_<display hash>`` and carries no
    timestamp or random component.
    """
    signals = signals or {}
    browser = _digest(canonicalize_signals(signals, FALLBACK_BROWSER_SIGNALS))
    display = _digest(canonicalize_signals(signals, FALLBACK_DISPLAY_SIGNALS))
    return (
        f"{FALLBACK_PREFIX}{browser[:FALLBACK_HASH_LENGTH]}"
        f"_{display[:FALLBACK_HASH_LENGTH]}"
    )


def build_fingerprint(
    collect: Callable[[], Dict],
    fallback_signals: Optional[Mapping] = None,
) -> Tuple[str, bool]:
    """
    Run signal collection and produce the best fingerprint available.

    Args:
        collect: Callable returning the signal mapping; may raise when the
            environment blocks the APIs it relies on
        fallback_signals: Signals still readable when ``collect`` fails

    Returns:
        tuple: (fingerprint: str, is_fallback: bool)
    """
    signals = None
    try:
        signals = collect()
        fingerprint = generate_primary_fingerprint(signals)
        if validate_fingerprint(fingerprint):
            return fingerprint, False
        logger.warning("Primary fingerprint failed validation, using fallback")
    except Exception as e:
        logger.info(f"Primary fingerprint unavailable, using fallback: {e}")

    if fallback_signals is None and isinstance(signals, Mapping):
        fallback_signals = signals
    return generate_fallback_fingerprint(fallback_signals), True
