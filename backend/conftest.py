"""
Pytest configuration and fixtures for all tests.
This file makes fixtures available to all tests in backend/.
"""

import pytest
from django.core.cache import cache

from apps.votes.engine import DecisionPolicy, VoteDecisionEngine
from apps.votes.stores import DatabaseVoteStore, InMemoryVoteStore
from core.utils.ip_reputation import DisabledReputationChecker, ReputationResult

CANDIDATES = ("ersin-tatar", "tufan-erhurman", "mehmet-hasguler")


class StaticReputationChecker:
    """Reputation checker returning a fixed classification."""

    def __init__(self, is_anonymizing=False, error=None):
        self.result = ReputationResult(is_anonymizing=is_anonymizing, error=error)
        self.checked = []

    def check(self, ip_address):
        self.checked.append(ip_address)
        return self.result


@pytest.fixture(autouse=True)
def clear_cache():
    """Throttle history and reputation lookups must not leak between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def policy():
    """Open poll with the default thresholds."""
    return DecisionPolicy(candidates=CANDIDATES, test_mode=True)


@pytest.fixture
def memory_store():
    return InMemoryVoteStore()


@pytest.fixture
def db_store(db):
    """Database store writing attempts inline."""
    return DatabaseVoteStore(async_audit=False)


@pytest.fixture
def reputation_checker():
    return StaticReputationChecker()


@pytest.fixture
def engine(memory_store, reputation_checker, policy):
    """Decision engine over a fresh in-memory store."""
    return VoteDecisionEngine(memory_store, reputation_checker, policy)


@pytest.fixture
def db_engine(db_store, policy):
    """Decision engine over the database store."""
    return VoteDecisionEngine(db_store, DisabledReputationChecker(), policy)


@pytest.fixture
def api_client():
    """Create a DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()
