"""
Vote attempt audit logging.

Every vote attempt, accepted or not, is appended to the attempt log. The log
is for operators only and never feeds back into voting decisions, so a failed
write is logged and swallowed rather than failing the vote.
"""

import logging
import re
from typing import Optional

from django.utils import timezone

from core.utils.fingerprint_validation import truncate_fingerprint

logger = logging.getLogger(__name__)

MAX_LOGGED_VALUE_LENGTH = 100
UNSAFE_CHARACTERS = re.compile(r"[<>\"'&]")


def sanitize_log_value(value) -> str:
    """Strip markup characters and cap length before a value is stored."""
    if value is None:
        return ""
    return UNSAFE_CHARACTERS.sub("", str(value).strip())[:MAX_LOGGED_VALUE_LENGTH]


class AttemptLogger:
    """Writes attempt log entries to a vote store."""

    def __init__(self, store):
        self.store = store

    def build_entry(
        self,
        ip_address: Optional[str],
        fingerprint,
        candidate,
        success: bool,
        reason: str,
        timestamp=None,
    ) -> dict:
        return {
            "timestamp": timestamp or timezone.now(),
            "ip_address": sanitize_log_value(ip_address),
            "fingerprint_prefix": truncate_fingerprint(sanitize_log_value(fingerprint)),
            "candidate": sanitize_log_value(candidate),
            "success": success,
            "reason": reason,
        }

    def log(self, ip_address, fingerprint, candidate, success, reason, timestamp=None):
        """
        Append one entry; never raises.

        Returns:
            dict: The entry that was handed to the store
        """
        entry = self.build_entry(ip_address, fingerprint, candidate, success, reason, timestamp)
        try:
            self.store.record_attempt(entry)
        except Exception as e:
            logger.error(f"Error recording vote attempt from {entry['ip_address']}: {e}")

        status = "SUCCESS" if success else "FAILED"
        logger.info(
            f"Vote attempt {status} from {entry['ip_address']} "
            f"fingerprint={entry['fingerprint_prefix']} reason={reason}"
        )
        return entry
