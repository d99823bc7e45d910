"""
Results calculation service for the poll.
Tallies the vote ledger and formats percentages for display.
"""

import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)

RESULTS_CACHE_KEY = "poll_results"
PERCENTAGE_QUANTUM = Decimal("0.1")

# Process start, for the status endpoint
PROCESS_STARTED_AT = time.monotonic()


def format_percentage(count: int, total: int):
    """
    Percentage of ``total`` with one decimal, rounded half-up.

    Returns the integer 0 when nothing has been counted yet.
    """
    if total <= 0:
        return 0
    percentage = Decimal(count) * 100 / Decimal(total)
    return str(percentage.quantize(PERCENTAGE_QUANTUM, rounding=ROUND_HALF_UP))


def calculate_poll_results(store, candidates: Iterable[str], use_cache: bool = True) -> Dict:
    """
    Calculate poll results from the vote store.

    Args:
        store: Vote store to tally
        candidates: Candidates to report, in display order
        use_cache: Whether to use cached results (TTL from POLL_RESULTS_CACHE_TTL)

    Returns:
        dict: {
            "votes": {candidate: int, ..., "total": int},
            "percentages": {candidate: "xx.x" or 0}
        }
    """
    candidates = list(candidates)
    cache_ttl = getattr(settings, "POLL_RESULTS_CACHE_TTL", 0)

    if use_cache and cache_ttl:
        cached_results = cache.get(RESULTS_CACHE_KEY)
        if cached_results:
            logger.debug("Returning cached poll results")
            return cached_results

    counts = store.candidate_counts()
    votes = {candidate: counts.get(candidate, 0) for candidate in candidates}
    # Only configured candidates count towards the total
    total = sum(votes.values())
    votes["total"] = total

    percentages = {candidate: format_percentage(votes[candidate], total) for candidate in candidates}
    results = {"votes": votes, "percentages": percentages}

    if use_cache and cache_ttl:
        try:
            cache.set(RESULTS_CACHE_KEY, results, cache_ttl)
        except Exception as e:
            logger.error(f"Error caching poll results: {e}")

    return results


def invalidate_results_cache():
    """Drop cached results so the next read reflects newly accepted votes."""
    try:
        cache.delete(RESULTS_CACHE_KEY)
        logger.debug("Invalidated poll results cache")
    except Exception as e:
        logger.error(f"Error invalidating poll results cache: {e}")


def get_poll_status(store, policy, now: Optional[object] = None) -> Dict:
    """
    Operational status of the poll.

    Returns:
        dict: server_time, poll_open, poll_closes_at, test_mode,
        storage_connected, uptime_seconds
    """
    now = now or timezone.now()
    return {
        "server_time": now.isoformat(),
        "poll_open": policy.is_open(now),
        "poll_closes_at": policy.closes_at.isoformat(),
        "test_mode": policy.test_mode,
        "storage_connected": store.is_available(),
        "uptime_seconds": int(time.monotonic() - PROCESS_STARTED_AT),
    }
