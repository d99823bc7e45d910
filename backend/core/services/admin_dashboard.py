"""
Admin dashboard service: attempt log report for operators.
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 100


def get_attempt_log_report(store, limit: int = DEFAULT_LOG_LIMIT) -> Dict:
    """
    Get recent vote attempts and aggregate statistics.

    Args:
        store: Vote store holding the attempt log
        limit: Number of recent entries to return

    Returns:
        dict: {
            "logs": [most recent entries, newest first],
            "statistics": {
                "total_attempts": int,
                "successful_votes": int,
                "failed_attempts": int,
                "unique_ips": int,
                "unique_fingerprints": int,
                "success_rate": "xx.xx%"
            }
        }
    """
    logs = []
    for entry in store.recent_attempts(limit):
        entry = dict(entry)
        timestamp = entry.get("timestamp")
        if hasattr(timestamp, "isoformat"):
            entry["timestamp"] = timestamp.isoformat()
        logs.append(entry)

    return {
        "logs": logs,
        "statistics": store.attempt_statistics(),
    }
