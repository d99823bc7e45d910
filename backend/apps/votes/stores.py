"""
Vote ledger stores.

The decision engine talks to the ledger only through the ``VoteStore``
interface. Two implementations ship:

- ``InMemoryVoteStore``: process-lifetime state behind one lock, used for demo
  deployments and tests.
- ``DatabaseVoteStore``: the Django ORM, where the unique fingerprint
  constraint settles concurrent inserts.

Only ``insert_vote`` is linearizable. Every other read is advisory and may lag
behind concurrent writers.
"""

import logging
import threading
from collections import Counter, deque
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from django.conf import settings
from django.db import DatabaseError, IntegrityError, connection, transaction
from django.db.models import Count
from django.utils import timezone

from core.exceptions import DuplicateVoteError, StorageError
from core.utils.fingerprint_validation import FALLBACK_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPT_LOG_LIMIT = 1000
DEVICE_SIGNATURE_UA_LENGTH = 100


def device_signature(ip_address: str, user_agent: Optional[str]) -> str:
    """IP plus truncated User-Agent, the key used for device signature checks."""
    return f"{ip_address}|{(user_agent or '')[:DEVICE_SIGNATURE_UA_LENGTH]}"


def build_attempt_statistics(attempts: Iterable[Dict]) -> Dict:
    """
    Summarize attempt log entries.

    Returns:
        dict: total_attempts, successful_votes, failed_attempts, unique_ips,
        unique_fingerprints and success_rate formatted as ``"xx.xx%"``
    """
    total = 0
    successful = 0
    ips = set()
    fingerprints = set()
    for attempt in attempts:
        total += 1
        if attempt.get("success"):
            successful += 1
        if attempt.get("ip_address"):
            ips.add(attempt["ip_address"])
        if attempt.get("fingerprint_prefix"):
            fingerprints.add(attempt["fingerprint_prefix"])

    success_rate = (successful / total * 100) if total else 0
    return {
        "total_attempts": total,
        "successful_votes": successful,
        "failed_attempts": total - successful,
        "unique_ips": len(ips),
        "unique_fingerprints": len(fingerprints),
        "success_rate": f"{success_rate:.2f}%",
    }


class VoteStore:
    """Interface shared by the ledger implementations."""

    def has_vote(self, fingerprint: str, ip_address: Optional[str] = None) -> bool:
        """True if the fingerprint voted (from ``ip_address`` when given)."""
        raise NotImplementedError

    def fallback_vote_exists(self, ip_address: str, exclude_fingerprint: Optional[str] = None) -> bool:
        """True if another fallback fingerprint already voted from this IP."""
        raise NotImplementedError

    def fingerprints_for_ip(self, ip_address: str) -> Set[str]:
        raise NotImplementedError

    def count_votes_for_ip(self, ip_address: str, since: Optional[datetime] = None) -> int:
        raise NotImplementedError

    def device_signature_conflict(self, ip_address: str, user_agent: str, fingerprint: str) -> bool:
        """True if this IP and browser already voted with a different fingerprint."""
        raise NotImplementedError

    def insert_vote(self, candidate: str, fingerprint: str, ip_address: str, user_agent: str = "", created_at: Optional[datetime] = None):
        """
        Atomically append a vote.

        Raises:
            DuplicateVoteError: If the fingerprint already voted
            StorageError: If the ledger cannot be written
        """
        raise NotImplementedError

    def candidate_counts(self) -> Dict[str, int]:
        raise NotImplementedError

    def record_attempt(self, entry: Dict) -> None:
        raise NotImplementedError

    def recent_attempts(self, limit: int = 100) -> List[Dict]:
        """Most recent attempt entries, newest first."""
        raise NotImplementedError

    def attempt_statistics(self) -> Dict:
        raise NotImplementedError

    def is_available(self) -> bool:
        return True


class InMemoryVoteStore(VoteStore):
    """
    Process-lifetime ledger.

    State is lost on restart. The check and the insert of ``insert_vote`` run
    under one lock so two concurrent first votes for a fingerprint cannot both
    succeed.
    """

    def __init__(self, attempt_log_limit: int = DEFAULT_ATTEMPT_LOG_LIMIT):
        self._lock = threading.Lock()
        self._votes: Dict[str, Dict] = {}
        self._ip_votes: Dict[str, List[Dict]] = {}
        self._device_signatures: Dict[str, str] = {}
        self._attempts = deque(maxlen=attempt_log_limit)

    def has_vote(self, fingerprint, ip_address=None):
        with self._lock:
            vote = self._votes.get(fingerprint)
            if vote is None:
                return False
            return ip_address is None or vote["ip_address"] == ip_address

    def fallback_vote_exists(self, ip_address, exclude_fingerprint=None):
        with self._lock:
            return any(
                vote["fingerprint"].startswith(FALLBACK_PREFIX)
                and vote["fingerprint"] != exclude_fingerprint
                for vote in self._ip_votes.get(ip_address, [])
            )

    def fingerprints_for_ip(self, ip_address):
        with self._lock:
            return {vote["fingerprint"] for vote in self._ip_votes.get(ip_address, [])}

    def count_votes_for_ip(self, ip_address, since=None):
        with self._lock:
            votes = self._ip_votes.get(ip_address, [])
            if since is None:
                return len(votes)
            return sum(1 for vote in votes if vote["created_at"] >= since)

    def device_signature_conflict(self, ip_address, user_agent, fingerprint):
        with self._lock:
            existing = self._device_signatures.get(device_signature(ip_address, user_agent))
        return existing is not None and existing != fingerprint

    def insert_vote(self, candidate, fingerprint, ip_address, user_agent="", created_at=None):
        vote = dict(
            candidate=candidate,
            fingerprint=fingerprint,
            ip_address=ip_address,
            user_agent=user_agent or "",
            created_at=created_at or timezone.now(),
        )
        with self._lock:
            if fingerprint in self._votes:
                raise DuplicateVoteError()
            self._votes[fingerprint] = vote
            self._ip_votes.setdefault(ip_address, []).append(vote)
            self._device_signatures[device_signature(ip_address, user_agent)] = fingerprint
        return vote

    def candidate_counts(self):
        with self._lock:
            return dict(Counter(vote["candidate"] for vote in self._votes.values()))

    def record_attempt(self, entry):
        with self._lock:
            self._attempts.append(dict(entry))

    def recent_attempts(self, limit=100):
        with self._lock:
            attempts = list(self._attempts)
        return list(reversed(attempts[-limit:])) if limit else []

    def attempt_statistics(self):
        with self._lock:
            attempts = list(self._attempts)
        return build_attempt_statistics(attempts)


class DatabaseVoteStore(VoteStore):
    """Ledger backed by the ``Vote`` and ``VoteAttempt`` models."""

    def __init__(self, async_audit: bool = True):
        """
        Args:
            async_audit: Hand attempt entries to Celery instead of writing inline
        """
        self.async_audit = async_audit

    @staticmethod
    def _vote_model():
        from apps.votes.models import Vote

        return Vote

    @staticmethod
    def _attempt_model():
        from apps.votes.models import VoteAttempt

        return VoteAttempt

    def _votes(self):
        return self._vote_model().objects.all()

    def has_vote(self, fingerprint, ip_address=None):
        queryset = self._votes().filter(fingerprint=fingerprint)
        if ip_address is not None:
            queryset = queryset.filter(ip_address=ip_address)
        return queryset.exists()

    def fallback_vote_exists(self, ip_address, exclude_fingerprint=None):
        queryset = self._votes().filter(
            ip_address=ip_address,
            fingerprint__startswith=FALLBACK_PREFIX,
        )
        if exclude_fingerprint:
            queryset = queryset.exclude(fingerprint=exclude_fingerprint)
        return queryset.exists()

    def fingerprints_for_ip(self, ip_address):
        return set(
            self._votes().filter(ip_address=ip_address).values_list("fingerprint", flat=True)
        )

    def count_votes_for_ip(self, ip_address, since=None):
        queryset = self._votes().filter(ip_address=ip_address)
        if since is not None:
            queryset = queryset.filter(created_at__gte=since)
        return queryset.count()

    def device_signature_conflict(self, ip_address, user_agent, fingerprint):
        # Rebuilt from the ledger: same IP and User-Agent prefix, other fingerprint
        ua_prefix = (user_agent or "")[:DEVICE_SIGNATURE_UA_LENGTH]
        user_agents = (
            self._votes()
            .filter(ip_address=ip_address, user_agent__startswith=ua_prefix)
            .exclude(fingerprint=fingerprint)
            .values_list("user_agent", flat=True)
        )
        return any(ua[:DEVICE_SIGNATURE_UA_LENGTH] == ua_prefix for ua in user_agents)

    def insert_vote(self, candidate, fingerprint, ip_address, user_agent="", created_at=None):
        Vote = self._vote_model()
        try:
            with transaction.atomic():
                return Vote.objects.create(
                    candidate=candidate,
                    fingerprint=fingerprint,
                    ip_address=ip_address,
                    user_agent=user_agent or "",
                    created_at=created_at or timezone.now(),
                )
        except IntegrityError:
            # Lost the race against a concurrent first vote
            logger.info(f"Unique constraint rejected vote from {ip_address}")
            raise DuplicateVoteError()
        except DatabaseError as e:
            logger.error(f"Error recording vote from {ip_address}: {e}", exc_info=True)
            raise StorageError(str(e))

    def candidate_counts(self):
        rows = self._votes().order_by().values("candidate").annotate(count=Count("id"))
        return {row["candidate"]: row["count"] for row in rows}

    def record_attempt(self, entry):
        if self.async_audit:
            from apps.votes.tasks import record_vote_attempt

            try:
                record_vote_attempt.delay(_serialize_attempt(entry))
                return
            except Exception as e:
                logger.warning(f"Could not enqueue vote attempt, writing inline: {e}")
        write_attempt(entry)

    def recent_attempts(self, limit=100):
        attempts = self._attempt_model().objects.order_by("-timestamp", "-id")[:limit]
        return [
            {
                "timestamp": attempt.timestamp.isoformat(),
                "ip_address": attempt.ip_address,
                "fingerprint_prefix": attempt.fingerprint_prefix,
                "candidate": attempt.candidate,
                "success": attempt.success,
                "reason": attempt.reason,
            }
            for attempt in attempts
        ]

    def attempt_statistics(self):
        queryset = self._attempt_model().objects.all()
        return build_attempt_statistics(
            queryset.values("success", "ip_address", "fingerprint_prefix").iterator()
        )

    def is_available(self):
        try:
            connection.ensure_connection()
            return True
        except DatabaseError as e:
            logger.error(f"Vote store unavailable: {e}")
            return False


def _serialize_attempt(entry: Dict) -> Dict:
    """Make an attempt entry JSON-safe for the task queue."""
    data = dict(entry)
    timestamp = data.get("timestamp")
    if isinstance(timestamp, datetime):
        data["timestamp"] = timestamp.isoformat()
    return data


def write_attempt(entry: Dict):
    """Persist one attempt entry as a ``VoteAttempt`` row."""
    from apps.votes.models import VoteAttempt

    timestamp = entry.get("timestamp")
    if isinstance(timestamp, str):
        timestamp = datetime.fromisoformat(timestamp)

    return VoteAttempt.objects.create(
        timestamp=timestamp or timezone.now(),
        ip_address=entry.get("ip_address") or "",
        fingerprint_prefix=entry.get("fingerprint_prefix") or "",
        candidate=entry.get("candidate") or "",
        success=bool(entry.get("success")),
        reason=entry.get("reason") or "",
    )


def build_vote_store(backend: Optional[str] = None) -> VoteStore:
    """
    Build the store selected by ``VOTE_STORE_BACKEND``.

    Args:
        backend: "database" or "memory" (defaults to the setting)
    """
    backend = backend or getattr(settings, "VOTE_STORE_BACKEND", "database")
    if backend == "memory":
        return InMemoryVoteStore(
            attempt_log_limit=getattr(settings, "VOTE_ATTEMPT_LOG_LIMIT", DEFAULT_ATTEMPT_LOG_LIMIT)
        )
    if backend == "database":
        return DatabaseVoteStore(async_audit=getattr(settings, "VOTE_ASYNC_AUDIT_LOG", True))
    raise ValueError(f"Unknown vote store backend: {backend}")


def get_vote_store() -> VoteStore:
    """Return the store held by the votes app config."""
    from django.apps import apps

    return apps.get_app_config("votes").vote_store
