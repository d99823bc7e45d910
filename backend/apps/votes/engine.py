"""
Duplicate-vote decision engine.

Decides whether an incoming vote is an honest first cast, a duplicate, or a
fraud attempt. Checks run in a fixed order and the first rejection wins:

1. Poll closed (skipped in test mode)
2. Input validation (missing fields, fingerprint format, candidate)
3. Network reputation (VPN/proxy/hosting), fail-open
4. Fallback fingerprint lockout per IP
5. Exact duplicate
6. Burst heuristic, then the optional device signature and per-IP cap rules
7. Atomic insert guarded by the unique fingerprint constraint

Every outcome is written to the attempt log.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Optional, Tuple

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.exceptions import (
    AnonymizingNetworkError,
    BurstLimitError,
    DeviceSignatureError,
    DuplicateVoteError,
    FallbackLockoutError,
    FingerprintValidationError,
    InvalidCandidateError,
    InvalidVoteError,
    IPVoteLimitError,
    PollClosedError,
    StorageError,
    VotingError,
)
from core.utils.fingerprint_validation import (
    get_fallback_base,
    is_fallback_fingerprint,
    truncate_fingerprint,
    validate_fingerprint_format,
)

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES = ("ersin-tatar", "tufan-erhurman", "mehmet-hasguler")
DEFAULT_POLL_CLOSES_AT = "2025-12-31T23:59:59+03:00"

ACCEPTED_REASON = "vote recorded"


def parse_closes_at(value) -> datetime:
    """Parse the configured poll close time into an aware datetime."""
    if isinstance(value, datetime):
        closes_at = value
    else:
        closes_at = parse_datetime(str(value))
        if closes_at is None:
            raise ValueError(f"Invalid POLL_CLOSES_AT value: {value!r}")
    if timezone.is_naive(closes_at):
        closes_at = timezone.make_aware(closes_at, dt_timezone.utc)
    return closes_at


@dataclass(frozen=True)
class DecisionPolicy:
    """Tunable thresholds of the decision engine."""

    candidates: Tuple[str, ...] = DEFAULT_CANDIDATES
    closes_at: datetime = field(default_factory=lambda: parse_closes_at(DEFAULT_POLL_CLOSES_AT))
    test_mode: bool = False
    burst_window: timedelta = timedelta(hours=1)
    burst_threshold: int = 5
    strict_fingerprint_uniqueness: bool = True
    device_signature_check: bool = False
    max_votes_per_ip: int = 0

    @classmethod
    def from_settings(cls):
        """Build the policy from Django settings."""
        return cls(
            candidates=tuple(getattr(settings, "POLL_CANDIDATES", DEFAULT_CANDIDATES)),
            closes_at=parse_closes_at(getattr(settings, "POLL_CLOSES_AT", DEFAULT_POLL_CLOSES_AT)),
            test_mode=getattr(settings, "POLL_TEST_MODE", False),
            burst_window=timedelta(seconds=getattr(settings, "VOTE_BURST_WINDOW_SECONDS", 3600)),
            burst_threshold=getattr(settings, "VOTE_BURST_THRESHOLD", 5),
            strict_fingerprint_uniqueness=getattr(settings, "VOTE_STRICT_FINGERPRINT_UNIQUENESS", True),
            device_signature_check=getattr(settings, "VOTE_DEVICE_SIGNATURE_CHECK", False),
            max_votes_per_ip=getattr(settings, "VOTE_MAX_VOTES_PER_IP", 0),
        )

    def is_open(self, now: Optional[datetime] = None) -> bool:
        if self.test_mode:
            return True
        return (now or timezone.now()) <= self.closes_at


@dataclass
class VoteDecision:
    """Outcome of one decision."""

    accepted: bool
    reason: str
    error: Optional[VotingError] = None
    vote: Any = None


class VoteDecisionEngine:
    """
    Applies the ordered duplicate-detection policy to vote submissions.

    The engine owns no state: history comes from ``store``, network
    classification from ``reputation_checker``.
    """

    def __init__(self, store, reputation_checker, policy: Optional[DecisionPolicy] = None, attempt_logger=None):
        from apps.votes.audit import AttemptLogger

        self.store = store
        self.reputation_checker = reputation_checker
        self.policy = policy or DecisionPolicy.from_settings()
        self.attempt_logger = attempt_logger or AttemptLogger(store)

    def decide(self, ip_address, fingerprint, user_agent, candidate, now: Optional[datetime] = None) -> VoteDecision:
        """
        Decide on one vote submission and record the attempt.

        Args:
            ip_address: Resolved client IP (may be "unknown")
            fingerprint: Client fingerprint, unvalidated
            user_agent: Raw User-Agent header
            candidate: Candidate identifier, unvalidated
            now: Decision time (defaults to now)

        Returns:
            VoteDecision: ``accepted`` with the stored vote, or the rejection
            error and its reason
        """
        now = now or timezone.now()
        user_agent = user_agent or ""

        try:
            vote = self._evaluate(ip_address, fingerprint, user_agent, candidate, now)
        except VotingError as e:
            if e.status_code >= 500:
                logger.error(f"Storage failure deciding vote from {ip_address}: {e.message}")
            else:
                logger.info(
                    f"Vote rejected from {ip_address} "
                    f"fingerprint={truncate_fingerprint(fingerprint)}: {e.reason}"
                )
            self.attempt_logger.log(ip_address, fingerprint, candidate, False, e.reason, timestamp=now)
            return VoteDecision(accepted=False, reason=e.reason, error=e)

        self.attempt_logger.log(ip_address, fingerprint, candidate, True, ACCEPTED_REASON, timestamp=now)
        return VoteDecision(accepted=True, reason=ACCEPTED_REASON, vote=vote)

    def _evaluate(self, ip_address, fingerprint, user_agent, candidate, now):
        try:
            self._check_poll_open(now)
            self._check_input(fingerprint, candidate)
            # Legacy fallback tokens carry a per-session suffix; police the stable part
            fingerprint = get_fallback_base(fingerprint)
            self._check_reputation(ip_address)
            self._check_fallback_lockout(ip_address, fingerprint)
            self._check_duplicate(ip_address, fingerprint)
            self._check_network_volume(ip_address, fingerprint, user_agent, now)
            return self.store.insert_vote(
                candidate=candidate,
                fingerprint=fingerprint,
                ip_address=ip_address,
                user_agent=user_agent,
                created_at=now,
            )
        except DatabaseError as e:
            # Never accept when the ledger cannot be consulted
            logger.error(f"Error reading vote ledger for {ip_address}: {e}", exc_info=True)
            raise StorageError(str(e))

    def _check_poll_open(self, now):
        if not self.policy.is_open(now):
            raise PollClosedError()

    def _check_input(self, fingerprint, candidate):
        if not fingerprint or not candidate:
            raise InvalidVoteError()

        is_valid, error_message = validate_fingerprint_format(fingerprint)
        if not is_valid:
            raise FingerprintValidationError(error_message)

        if candidate not in self.policy.candidates:
            raise InvalidCandidateError()

    def _check_reputation(self, ip_address):
        try:
            result = self.reputation_checker.check(ip_address)
        except Exception as e:
            # Advisory check: a broken checker never blocks a vote
            logger.error(f"IP reputation check failed for {ip_address}: {e}")
            return

        if result.is_anonymizing:
            raise AnonymizingNetworkError()

    def _check_fallback_lockout(self, ip_address, fingerprint):
        if not is_fallback_fingerprint(fingerprint):
            return
        if self.store.fallback_vote_exists(ip_address, exclude_fingerprint=fingerprint):
            raise FallbackLockoutError()

    def _check_duplicate(self, ip_address, fingerprint):
        if self.policy.strict_fingerprint_uniqueness:
            exists = self.store.has_vote(fingerprint)
        else:
            exists = self.store.has_vote(fingerprint, ip_address=ip_address)
        if exists:
            raise DuplicateVoteError()

    def _check_network_volume(self, ip_address, fingerprint, user_agent, now):
        known_fingerprints = self.store.fingerprints_for_ip(ip_address)
        if fingerprint in known_fingerprints:
            # Already seen from this network: only the uniqueness rules apply
            return

        if self.policy.burst_threshold > 0:
            recent = self.store.count_votes_for_ip(ip_address, since=now - self.policy.burst_window)
            if recent >= self.policy.burst_threshold:
                raise BurstLimitError()

        if self.policy.device_signature_check and self.store.device_signature_conflict(
            ip_address, user_agent, fingerprint
        ):
            raise DeviceSignatureError()

        if self.policy.max_votes_per_ip > 0:
            if self.store.count_votes_for_ip(ip_address) >= self.policy.max_votes_per_ip:
                raise IPVoteLimitError()
