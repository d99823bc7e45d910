"""
Tests for poll results and status services.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from django.core.cache import cache
from django.test import override_settings
from django.utils import timezone

from apps.polls.services import (
    RESULTS_CACHE_KEY,
    calculate_poll_results,
    format_percentage,
    get_poll_status,
    invalidate_results_cache,
)
from apps.votes.engine import DecisionPolicy
from apps.votes.stores import InMemoryVoteStore

CANDIDATES = ("ersin-tatar", "tufan-erhurman", "mehmet-hasguler")


def store_with_votes(**counts):
    store = InMemoryVoteStore()
    n = 0
    for candidate, count in counts.items():
        for _ in range(count):
            store.insert_vote(candidate.replace("_", "-"), f"fp_device_{n:04d}", f"8.8.{n}.1")
            n += 1
    return store


@pytest.mark.unit
class TestFormatPercentage:
    def test_zero_total(self):
        assert format_percentage(0, 0) == 0

    def test_one_decimal(self):
        assert format_percentage(1, 3) == "33.3"
        assert format_percentage(2, 3) == "66.7"
        assert format_percentage(1, 1) == "100.0"

    def test_rounds_half_up(self):
        # 1/8 = 12.5% exactly, 1/16 = 6.25%
        assert format_percentage(1, 16) == "6.3"
        assert format_percentage(3, 16) == "18.8"


@pytest.mark.unit
class TestCalculatePollResults:
    def test_empty_poll(self):
        results = calculate_poll_results(InMemoryVoteStore(), CANDIDATES)

        assert results["votes"] == {
            "ersin-tatar": 0,
            "tufan-erhurman": 0,
            "mehmet-hasguler": 0,
            "total": 0,
        }
        assert results["percentages"] == {
            "ersin-tatar": 0,
            "tufan-erhurman": 0,
            "mehmet-hasguler": 0,
        }

    def test_counts_and_percentages(self):
        store = store_with_votes(ersin_tatar=2, tufan_erhurman=1)

        results = calculate_poll_results(store, CANDIDATES)

        assert results["votes"] == {
            "ersin-tatar": 2,
            "tufan-erhurman": 1,
            "mehmet-hasguler": 0,
            "total": 3,
        }
        assert results["percentages"] == {
            "ersin-tatar": "66.7",
            "tufan-erhurman": "33.3",
            "mehmet-hasguler": "0.0",
        }

    def test_total_is_sum_of_candidate_counts(self):
        store = Mock()
        store.candidate_counts.return_value = {"ersin-tatar": 4, "retired-candidate": 7}

        results = calculate_poll_results(store, CANDIDATES)

        assert results["votes"]["total"] == 4
        assert "retired-candidate" not in results["votes"]

    @override_settings(POLL_RESULTS_CACHE_TTL=60)
    def test_results_cached(self):
        store = Mock()
        store.candidate_counts.return_value = {"ersin-tatar": 1}

        first = calculate_poll_results(store, CANDIDATES)
        second = calculate_poll_results(store, CANDIDATES)

        assert first == second
        assert store.candidate_counts.call_count == 1
        assert cache.get(RESULTS_CACHE_KEY) == first

    @override_settings(POLL_RESULTS_CACHE_TTL=60)
    def test_cache_bypass(self):
        store = Mock()
        store.candidate_counts.return_value = {}

        calculate_poll_results(store, CANDIDATES, use_cache=False)
        calculate_poll_results(store, CANDIDATES, use_cache=False)

        assert store.candidate_counts.call_count == 2

    @override_settings(POLL_RESULTS_CACHE_TTL=60)
    def test_invalidate_results_cache(self):
        store = Mock()
        store.candidate_counts.side_effect = [{"ersin-tatar": 1}, {"ersin-tatar": 2}]

        calculate_poll_results(store, CANDIDATES)
        invalidate_results_cache()
        results = calculate_poll_results(store, CANDIDATES)

        assert cache.get(RESULTS_CACHE_KEY) == results
        assert results["votes"]["total"] == 2


@pytest.mark.unit
class TestPollStatus:
    def test_open_poll(self):
        now = timezone.now()
        policy = DecisionPolicy(candidates=CANDIDATES, closes_at=now + timedelta(days=1))

        status = get_poll_status(InMemoryVoteStore(), policy, now=now)

        assert status["poll_open"] is True
        assert status["test_mode"] is False
        assert status["storage_connected"] is True
        assert status["server_time"] == now.isoformat()
        assert status["poll_closes_at"] == policy.closes_at.isoformat()
        assert status["uptime_seconds"] >= 0

    def test_closed_poll(self):
        now = timezone.now()
        policy = DecisionPolicy(candidates=CANDIDATES, closes_at=now - timedelta(seconds=1))

        assert get_poll_status(InMemoryVoteStore(), policy, now=now)["poll_open"] is False

    def test_storage_down(self):
        store = Mock()
        store.is_available.return_value = False

        status = get_poll_status(store, DecisionPolicy(test_mode=True))

        assert status["storage_connected"] is False
        assert status["poll_open"] is True
