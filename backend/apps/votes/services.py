"""
Vote services: the entry point the HTTP layer uses to cast votes.
"""

import logging
from typing import Optional

from apps.polls.services import invalidate_results_cache
from apps.votes.engine import DecisionPolicy, VoteDecision, VoteDecisionEngine
from apps.votes.stores import get_vote_store
from core.utils.ip_reputation import get_reputation_checker

logger = logging.getLogger(__name__)


def get_decision_engine(store=None, reputation_checker=None, policy: Optional[DecisionPolicy] = None) -> VoteDecisionEngine:
    """
    Build a decision engine wired to the configured collaborators.

    Policy is read from settings on every call so overridden settings take
    effect without a restart.
    """
    return VoteDecisionEngine(
        store=store or get_vote_store(),
        reputation_checker=reputation_checker or get_reputation_checker(),
        policy=policy or DecisionPolicy.from_settings(),
    )


def cast_vote(
    ip_address: str,
    fingerprint,
    candidate,
    user_agent: str = "",
    engine: Optional[VoteDecisionEngine] = None,
) -> VoteDecision:
    """
    Cast a vote for a candidate.

    Args:
        ip_address: Resolved client IP address
        fingerprint: Client fingerprint
        candidate: Candidate identifier
        user_agent: User-Agent header
        engine: Decision engine (defaults to the configured one)

    Returns:
        VoteDecision: The accepted decision

    Raises:
        VotingError: The rejection raised by the decision engine
    """
    engine = engine or get_decision_engine()
    decision = engine.decide(
        ip_address=ip_address,
        fingerprint=fingerprint,
        user_agent=user_agent,
        candidate=candidate,
    )
    if not decision.accepted:
        raise decision.error

    invalidate_results_cache()
    logger.info(f"Vote recorded for {candidate} from {ip_address}")
    return decision
