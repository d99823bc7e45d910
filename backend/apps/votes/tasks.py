"""
Celery tasks for votes app.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def record_vote_attempt(entry: dict):
    """
    Persist a vote attempt to the audit log.

    Runs off the request path so a slow audit write never delays the vote
    response. Failures are logged and dropped; the attempt log is
    best-effort.

    Args:
        entry: Sanitized attempt entry (timestamp as ISO-8601 string)
    """
    from apps.votes.stores import write_attempt

    try:
        write_attempt(entry)
    except Exception as e:
        logger.error(f"Error writing vote attempt to audit log: {e}")
